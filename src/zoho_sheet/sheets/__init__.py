"""Zoho Sheet API client with OAuth authentication.

Manage Zoho Sheet workbooks, worksheets, tables and records.

Usage:
    from zoho_sheet.sheets import SheetClient

    async with SheetClient.from_env() as client:
        # List workbooks
        workbooks = await client.list_workbooks()

        # Create a worksheet
        sheet = await client.create_sheet(workbooks[0].id, "Tasks")

        # Add records under the header row
        await client.add_worksheet_records(
            workbooks[0].id, "Tasks", [{"Task": "Write docs", "Owner": "Sam"}]
        )

OAuth Setup:
    1. Create a client in the Zoho API console
    2. Put ZOHO_CLIENT_ID and ZOHO_CLIENT_SECRET in .env
    3. Authorize: zoho-sheet login
"""

from __future__ import annotations

from zoho_sheet.sheets.client import SheetClient
from zoho_sheet.sheets.models import (
    DeleteResult,
    HeaderRename,
    RecordCriteria,
    SheetRecord,
    Table,
    Workbook,
    Worksheet,
)

__all__ = [
    "SheetClient",
    "Workbook",
    "Worksheet",
    "Table",
    "RecordCriteria",
    "HeaderRename",
    "SheetRecord",
    "DeleteResult",
]
