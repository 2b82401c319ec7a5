"""Zoho Sheet API client implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from zoho_sheet.auth import ZohoOAuth
from zoho_sheet.config import load_config
from zoho_sheet.exceptions import InvalidArgumentError
from zoho_sheet.sheets.models import (
    DeleteResult,
    HeaderRename,
    RecordCriteria,
    SheetRecord,
    Table,
    Workbook,
    Worksheet,
)
from zoho_sheet.sheets.requests import ApiRequest, build_request
from zoho_sheet.sheets.responses import (
    check_response,
    decode_affected_rows,
    decode_delete_result,
    decode_inserted_worksheet,
    decode_list,
    decode_records,
    decode_status,
    decode_table,
    decode_workbook,
    decode_worksheet,
)

logger = logging.getLogger(__name__)


def _require(name: str, value: str | None) -> None:
    if not value:
        raise InvalidArgumentError(f"{name} must be provided.")


def _require_items(name: str, value: Sequence | dict | None) -> None:
    if not value:
        raise InvalidArgumentError(f"{name} cannot be null or empty.")


def _require_index(name: str, value: int) -> None:
    if value < 1:
        raise InvalidArgumentError(f"{name} must be 1 or greater, got {value}.")


class SheetClient:
    """Zoho Sheet API client with OAuth authentication.

    Every method is a single round trip: arguments are validated locally,
    the request is built and sent, and the response is decoded. Nothing is
    retried, batched or cached.

    Usage:
        async with SheetClient.from_env() as client:
            workbooks = await client.list_workbooks()

            table = await client.create_table(
                resource_id, "Sheet1", 1, 1, 10, 3, header_names=["Task", "Owner", "Status"]
            )
            rows = await client.fetch_table_records(
                resource_id,
                table.table_name,
                criteria=[RecordCriteria("Status", "=", "Open")],
            )

    Note:
        Requires a refresh token or device code. Run `zoho-sheet login` to
        obtain a refresh token.
    """

    def __init__(self, auth: ZohoOAuth, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize Sheet client.

        Args:
            auth: Token authority supplying access tokens.
            http_client: Client for API calls; its ``base_url`` must be the
                API root. Created from the auth config when omitted.
        """
        self.auth = auth
        self._http = http_client or httpx.AsyncClient(
            base_url=auth.config.base_api_url, timeout=30.0
        )
        self._owns_http = http_client is None

    @classmethod
    def from_env(cls, **overrides: str | None) -> SheetClient:
        """Create a client from ZOHO_* environment variables."""
        return cls(ZohoOAuth(load_config(**overrides)))

    async def _call(self, op: ApiRequest) -> dict[str, Any]:
        request = await build_request(self._http, self.auth, op)
        logger.debug(f"{request.method} {request.url}")
        response = await self._http.send(request)
        return check_response(response)

    async def aclose(self) -> None:
        """Close HTTP clients created by this client."""
        if self._owns_http:
            await self._http.aclose()
        await self.auth.aclose()

    async def __aenter__(self) -> SheetClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # =========================================================================
    # Workbooks
    # =========================================================================

    async def list_workbooks(
        self,
        start_index: int = 1,
        count: int = 50,
        sort_option: str = "recently_modified",
    ) -> list[Workbook]:
        """List workbooks visible to the user.

        Args:
            start_index: 1-based index of the first workbook.
            count: Maximum workbooks to return.
            sort_option: Sort order (e.g. "recently_modified", "name").

        Returns:
            List of Workbook.
        """
        _require_index("start_index", start_index)
        payload = await self._call(
            ApiRequest.rpc(
                "workbooks",
                "workbook.list",
                {"start_index": start_index, "count": count, "sort_option": sort_option},
            )
        )
        return decode_list(payload, "workbooks", decode_workbook, required=True)

    async def create_workbook(self, name: str) -> Workbook:
        """Create a new workbook.

        Args:
            name: Workbook name.

        Returns:
            Created Workbook (ID, name and URL).
        """
        _require("name", name)
        # Create is not under the /workbooks route
        payload = await self._call(
            ApiRequest.rpc("create", "workbook.create", {"workbook_name": name})
        )
        return decode_workbook(payload)

    async def delete_workbook(self, workbook_id: str) -> bool:
        _require("workbook_id", workbook_id)
        await self._call(ApiRequest.rest("DELETE", f"workbooks/{workbook_id}"))
        return True

    # =========================================================================
    # Worksheets
    # =========================================================================

    async def list_sheets(self, workbook_id: str) -> list[Worksheet]:
        """List the worksheets of a workbook."""
        _require("workbook_id", workbook_id)
        payload = await self._call(ApiRequest.rest("GET", f"workbooks/{workbook_id}/sheets"))
        return decode_list(payload, "data", decode_worksheet, required=True)

    async def create_sheet(self, workbook_id: str, sheet_name: str) -> Worksheet:
        """Insert a worksheet.

        Args:
            workbook_id: Workbook resource ID.
            sheet_name: Name of the new worksheet.

        Returns:
            The inserted Worksheet.
        """
        _require("workbook_id", workbook_id)
        _require("sheet_name", sheet_name)
        payload = await self._call(
            ApiRequest.rpc(workbook_id, "worksheet.insert", {"worksheet_name": sheet_name})
        )
        return decode_inserted_worksheet(payload)

    async def rename_sheet(self, workbook_id: str, old_name: str, new_name: str) -> bool:
        _require("workbook_id", workbook_id)
        _require("old_name", old_name)
        _require("new_name", new_name)
        await self._call(
            ApiRequest.rpc(
                workbook_id, "worksheet.rename", {"old_name": old_name, "new_name": new_name}
            )
        )
        return True

    async def delete_sheet(self, workbook_id: str, sheet_name: str) -> bool:
        _require("workbook_id", workbook_id)
        _require("sheet_name", sheet_name)
        await self._call(
            ApiRequest.rpc(workbook_id, "worksheet.delete", {"worksheet_name": sheet_name})
        )
        return True

    # =========================================================================
    # Columns and rows
    # =========================================================================

    def _sheet_path(self, workbook_id: str, sheet_id: str, *parts: str) -> str:
        _require("workbook_id", workbook_id)
        _require("sheet_id", sheet_id)
        return "/".join(["workbooks", workbook_id, "sheets", sheet_id, *parts])

    async def add_columns(self, workbook_id: str, sheet_id: str, columns: list[str]) -> bool:
        path = self._sheet_path(workbook_id, sheet_id, "columns")
        _require_items("columns", columns)
        await self._call(ApiRequest.rest("POST", path, {"columns": list(columns)}))
        return True

    async def remove_columns(
        self, workbook_id: str, sheet_id: str, column_indexes: list[int]
    ) -> bool:
        path = self._sheet_path(workbook_id, sheet_id, "columns")
        _require_items("column_indexes", column_indexes)
        await self._call(ApiRequest.rest("DELETE", path, {"columns": list(column_indexes)}))
        return True

    async def add_row(self, workbook_id: str, sheet_id: str, row_data: list[Any]) -> bool:
        """Append one row of values."""
        path = self._sheet_path(workbook_id, sheet_id, "rows")
        _require_items("row_data", row_data)
        await self._call(ApiRequest.rest("POST", path, {"data": [list(row_data)]}))
        return True

    async def update_cell(
        self, workbook_id: str, sheet_id: str, row: int, col: int, value: Any
    ) -> bool:
        """Set a single cell (1-based row and column)."""
        path = self._sheet_path(workbook_id, sheet_id, "rows")
        _require_index("row", row)
        _require_index("col", col)
        await self._call(
            ApiRequest.rest("PATCH", path, {"data": [{"row": row, "col": col, "value": value}]})
        )
        return True

    async def delete_row(self, workbook_id: str, sheet_id: str, row_index: int) -> bool:
        _require_index("row_index", row_index)
        path = self._sheet_path(workbook_id, sheet_id, "rows", str(row_index))
        await self._call(ApiRequest.rest("DELETE", path))
        return True

    # =========================================================================
    # Tables
    # =========================================================================

    async def list_tables(self, resource_id: str) -> list[Table]:
        """List all tables in a workbook."""
        _require("resource_id", resource_id)
        payload = await self._call(ApiRequest.rpc(resource_id, "table.list"))
        return decode_list(payload, "tables", decode_table)

    async def create_table(
        self,
        resource_id: str,
        worksheet_name: str,
        start_row: int,
        start_column: int,
        end_row: int,
        end_column: int,
        contains_header: bool = True,
        header_names: list[str] | None = None,
        table_style: dict[str, Any] | None = None,
    ) -> Table:
        """Create a table over a cell range.

        Args:
            resource_id: Workbook resource ID.
            worksheet_name: Worksheet holding the range.
            start_row: First row (1-based).
            start_column: First column (1-based).
            end_row: Last row.
            end_column: Last column.
            contains_header: Whether the first row is a header row.
            header_names: Header names to apply.
            table_style: Table style object, sent as JSON.

        Returns:
            Created Table. The range is echoed from the arguments.
        """
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        for name, value in (
            ("start_row", start_row),
            ("start_column", start_column),
            ("end_row", end_row),
            ("end_column", end_column),
        ):
            _require_index(name, value)

        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.create",
                {
                    "worksheet_name": worksheet_name,
                    "start_row": start_row,
                    "start_column": start_column,
                    "end_row": end_row,
                    "end_column": end_column,
                    "contains_header": contains_header,
                    "header_names": header_names,
                    "table_style": table_style,
                },
            )
        )
        return decode_table(
            {
                "start_row": start_row,
                "start_column": start_column,
                "end_row": end_row,
                "end_column": end_column,
                "table_name": payload.get("table_name"),
                "table_id": payload.get("table_id"),
            }
        )

    async def delete_table(
        self, resource_id: str, table_name: str, clear_format: bool = True
    ) -> bool:
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.remove",
                {"table_name": table_name, "clear_format": clear_format},
            )
        )
        return decode_status(payload)

    async def rename_table_headers(
        self, resource_id: str, table_name: str, headers: list[HeaderRename]
    ) -> bool:
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        _require_items("headers", headers)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.header.rename",
                {"table_name": table_name, "data": headers},
            )
        )
        return decode_status(payload)

    async def fetch_table_records(
        self,
        resource_id: str,
        table_name: str,
        criteria: list[RecordCriteria] | None = None,
        criteria_pattern: str | None = None,
        column_names: list[str] | None = None,
        render_option: str = "formatted",
        count: int = 50,
        is_case_sensitive: bool = True,
    ) -> list[SheetRecord]:
        """Fetch table rows matching the criteria.

        Args:
            resource_id: Workbook resource ID.
            table_name: Table name.
            criteria: Filter predicates (empty fetches all rows).
            criteria_pattern: How criteria combine, e.g. "and" or "1 or 2".
            column_names: Columns to return (all when empty).
            render_option: "formatted", "unformatted" or "formula".
            count: Maximum rows to return.
            is_case_sensitive: Case-sensitive matching.

        Returns:
            List of SheetRecord with the table row index.
        """
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.records.fetch",
                {
                    "table_name": table_name,
                    "criteria_json": list(criteria or []),
                    "criteria_pattern": criteria_pattern,
                    "column_names": ",".join(column_names or []),
                    "render_option": render_option,
                    "count": count,
                    "is_case_sensitive": is_case_sensitive,
                },
            )
        )
        return decode_records(payload)

    async def update_table_records(
        self,
        resource_id: str,
        table_name: str,
        criteria: list[RecordCriteria],
        criteria_pattern: str | None,
        data: dict[str, Any],
        is_case_sensitive: bool = True,
    ) -> int:
        """Update matching table rows.

        Returns:
            Number of affected rows.
        """
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        _require_items("criteria", criteria)
        _require_items("data", data)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.records.update",
                {
                    "table_name": table_name,
                    "criteria_json": list(criteria),
                    "criteria_pattern": criteria_pattern,
                    "is_case_sensitive": is_case_sensitive,
                    "data": data,
                },
            )
        )
        return decode_affected_rows(payload)

    async def delete_table_records(
        self,
        resource_id: str,
        table_name: str,
        criteria: list[RecordCriteria],
        criteria_pattern: str | None,
        is_case_sensitive: bool = True,
    ) -> DeleteResult:
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        _require_items("criteria", criteria)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.records.delete",
                {
                    "table_name": table_name,
                    "criteria_json": list(criteria),
                    "criteria_pattern": criteria_pattern,
                    "is_case_sensitive": is_case_sensitive,
                },
            )
        )
        return decode_delete_result(payload)

    async def insert_table_columns(
        self,
        resource_id: str,
        table_name: str,
        column_names: list[str],
        insert_after: str,
    ) -> bool:
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        _require_items("column_names", column_names)
        _require("insert_after", insert_after)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.columns.insert",
                {
                    "table_name": table_name,
                    "column_names": list(column_names),
                    "insert_column_after": insert_after,
                },
            )
        )
        return decode_status(payload)

    async def delete_table_columns(
        self, resource_id: str, table_name: str, column_names: list[str]
    ) -> bool:
        _require("resource_id", resource_id)
        _require("table_name", table_name)
        _require_items("column_names", column_names)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "table.columns.delete",
                {"table_name": table_name, "column_names": list(column_names)},
            )
        )
        return decode_status(payload)

    # =========================================================================
    # Worksheet records
    # =========================================================================

    async def fetch_worksheet_records(
        self,
        resource_id: str,
        worksheet_name: str,
        criteria: str | None = None,
        column_names: list[str] | None = None,
        records_start_index: int = 1,
        count: int = 50,
        is_case_sensitive: bool = True,
        render_option: str = "formatted",
        header_row: int = 1,
    ) -> list[SheetRecord]:
        """Fetch worksheet rows as records keyed by the header row.

        Args:
            resource_id: Workbook resource ID.
            worksheet_name: Worksheet name.
            criteria: Criteria expression, e.g. '"Status"="Open"'.
            column_names: Columns to return (all when empty).
            records_start_index: 1-based index of the first record.
            count: Maximum records to return.
            is_case_sensitive: Case-sensitive matching.
            render_option: "formatted", "unformatted" or "formula".
            header_row: Row holding the column names.

        Returns:
            List of SheetRecord.
        """
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        _require_index("records_start_index", records_start_index)
        _require_index("header_row", header_row)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "worksheet.records.fetch",
                {
                    "worksheet_name": worksheet_name,
                    "header_row": header_row,
                    "criteria": criteria or None,
                    "column_names": ",".join(column_names or []),
                    "render_option": render_option,
                    "records_start_index": records_start_index,
                    "count": count,
                    "is_case_sensitive": is_case_sensitive,
                },
            )
        )
        return decode_records(payload)

    async def add_worksheet_records(
        self,
        resource_id: str,
        worksheet_name: str,
        records: list[dict[str, Any]],
        header_row: int = 1,
    ) -> bool:
        """Append records below the header row."""
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        _require_items("records", records)
        _require_index("header_row", header_row)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "worksheet.records.add",
                {
                    "worksheet_name": worksheet_name,
                    "header_row": header_row,
                    "json_data": list(records),
                },
            )
        )
        return decode_status(payload)

    async def update_worksheet_records(
        self,
        resource_id: str,
        worksheet_name: str,
        criteria: str | None,
        data: dict[str, Any],
        is_case_sensitive: bool = True,
        header_row: int = 1,
    ) -> int:
        """Update worksheet records matching the criteria.

        Returns:
            Number of affected rows.
        """
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        _require_items("data", data)
        _require_index("header_row", header_row)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "worksheet.records.update",
                {
                    "worksheet_name": worksheet_name,
                    "header_row": header_row,
                    "criteria": criteria or None,
                    "is_case_sensitive": is_case_sensitive,
                    "data": data,
                },
            )
        )
        return decode_affected_rows(payload)

    async def delete_worksheet_records(
        self,
        resource_id: str,
        worksheet_name: str,
        criteria: str | None = None,
        row_array: list[int] | None = None,
        header_row: int = 1,
        delete_rows: bool = True,
    ) -> DeleteResult:
        """Delete worksheet records by criteria and/or row numbers.

        Args:
            resource_id: Workbook resource ID.
            worksheet_name: Worksheet name.
            criteria: Criteria expression selecting records.
            row_array: Explicit row numbers to delete.
            header_row: Row holding the column names.
            delete_rows: Remove the rows entirely instead of clearing them.

        Returns:
            DeleteResult with deleted and remaining row counts.
        """
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        _require_index("header_row", header_row)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "worksheet.records.delete",
                {
                    "worksheet_name": worksheet_name,
                    "header_row": header_row,
                    "criteria": criteria or None,
                    "row_array": list(row_array) if row_array else None,
                    "delete_rows": delete_rows,
                },
            )
        )
        return decode_delete_result(payload)

    async def insert_worksheet_columns(
        self,
        resource_id: str,
        worksheet_name: str,
        insert_after: str,
        column_names: list[str],
    ) -> bool:
        _require("resource_id", resource_id)
        _require("worksheet_name", worksheet_name)
        _require("insert_after", insert_after)
        _require_items("column_names", column_names)
        payload = await self._call(
            ApiRequest.rpc(
                resource_id,
                "records.columns.insert",
                {
                    "worksheet_name": worksheet_name,
                    "insert_column_after": insert_after,
                    "column_names": list(column_names),
                },
            )
        )
        return decode_status(payload)
