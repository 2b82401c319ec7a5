"""Tests for the Sheet API client."""

import asyncio
import os
from unittest.mock import patch

import httpx
import pytest
from conftest import Recorder, form, form_keys, json_body

from zoho_sheet.auth import ZohoOAuth
from zoho_sheet.config import ZohoConfig
from zoho_sheet.exceptions import InvalidArgumentError, MalformedResponseError, RemoteApiError
from zoho_sheet.sheets import (
    DeleteResult,
    HeaderRename,
    RecordCriteria,
    SheetClient,
    SheetRecord,
    Table,
    Workbook,
    Worksheet,
)

API = "https://sheet.zoho.com/api/v2/"


class TestClientSetup:
    """Test client construction."""

    def test_from_env(self):
        """Should build config and auth from the environment."""
        env = {"ZOHO_CLIENT_ID": "a", "ZOHO_CLIENT_SECRET": "b", "ZOHO_DATA_CENTER": "eu"}
        with patch.dict(os.environ, env, clear=True):
            client = SheetClient.from_env()
        assert client.auth.config.base_api_url == "https://sheet.zoho.eu/api/v2/"
        asyncio.run(client.aclose())

    def test_context_manager(self, sheet_client):
        """Should work as an async context manager."""

        async def use():
            async with sheet_client as client:
                return client

        assert asyncio.run(use()) is sheet_client

    def test_token_exchange_precedes_api_call(self):
        """Should fetch a token before sending the API request."""
        recorder = Recorder(
            {"access_token": "A", "expires_in": 3600},
            {"workbooks": []},
        )
        transport = httpx.MockTransport(recorder)
        config = ZohoConfig(client_id="X", client_secret="Y", refresh_token="R")
        auth = ZohoOAuth(config, http_client=httpx.AsyncClient(transport=transport))
        client = SheetClient(
            auth, http_client=httpx.AsyncClient(base_url=config.base_api_url, transport=transport)
        )

        assert asyncio.run(client.list_workbooks()) == []
        token_request, api_request = recorder.requests
        assert token_request.url.host == "accounts.zoho.com"
        assert api_request.headers["Authorization"] == "Zoho-oauthtoken A"


class TestWorkbooks:
    """Test workbook operations."""

    def test_list_workbooks_defaults(self, sheet_client, recorder):
        """Should send default paging and decode workbooks."""
        recorder.add(
            {
                "workbooks": [
                    {
                        "resource_id": "abc",
                        "workbook_name": "Budget",
                        "workbook_url": "https://sheet.zoho.com/sheet/open/abc",
                        "created_by": "sam",
                        "created_time": "1",
                        "last_modified_time": "2",
                    }
                ]
            }
        )
        workbooks = asyncio.run(sheet_client.list_workbooks())

        assert workbooks == [
            Workbook("abc", "Budget", "https://sheet.zoho.com/sheet/open/abc", "sam", "1", "2")
        ]
        request = recorder.last
        assert str(request.url) == f"{API}workbooks?method=workbook.list"
        assert request.headers["Authorization"] == "Zoho-oauthtoken cached-token"
        assert form(request) == {
            "start_index": "1",
            "count": "50",
            "sort_option": "recently_modified",
        }

    def test_list_workbooks_failure_envelope(self, sheet_client, recorder):
        """Should not mistake a failure payload for an empty listing."""
        recorder.add({"status": "failure", "error_message": "oops"})
        with pytest.raises(MalformedResponseError, match="workbooks"):
            asyncio.run(sheet_client.list_workbooks())

    def test_create_workbook(self, sheet_client, recorder):
        recorder.add({"resource_id": "new1", "workbook_name": "My", "workbook_url": "u"})
        workbook = asyncio.run(sheet_client.create_workbook("My"))

        assert workbook == Workbook(id="new1", name="My", url="u")
        assert str(recorder.last.url) == f"{API}create?method=workbook.create"
        assert form(recorder.last) == {"workbook_name": "My"}

    def test_delete_workbook(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        assert asyncio.run(sheet_client.delete_workbook("abc")) is True
        assert recorder.last.method == "DELETE"
        assert str(recorder.last.url) == f"{API}workbooks/abc"

    def test_unauthorized(self, sheet_client, recorder):
        """Should raise RemoteApiError with status 401 and the literal body."""
        recorder.add(httpx.Response(401, text="Invalid OAuth access token"))
        with pytest.raises(RemoteApiError) as exc_info:
            asyncio.run(sheet_client.delete_workbook("abc"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Invalid OAuth access token"


class TestWorksheets:
    """Test worksheet operations."""

    def test_list_sheets(self, sheet_client, recorder):
        recorder.add({"data": [{"id": "0#", "name": "Sheet1"}]})
        assert asyncio.run(sheet_client.list_sheets("abc")) == [Worksheet("0#", "Sheet1")]
        assert recorder.last.method == "GET"
        assert str(recorder.last.url) == f"{API}workbooks/abc/sheets"

    def test_list_sheets_missing_data(self, sheet_client, recorder):
        recorder.add({"unexpected": 1})
        with pytest.raises(MalformedResponseError, match="data"):
            asyncio.run(sheet_client.list_sheets("W"))

    def test_create_sheet(self, sheet_client, recorder):
        recorder.add(
            {
                "worksheet_names": [
                    {"worksheet_name": "Sheet1", "worksheet_id": "0#"},
                    {"worksheet_name": "Tasks", "worksheet_id": "1#"},
                ],
                "new_worksheet_name": "Tasks",
            }
        )
        sheet = asyncio.run(sheet_client.create_sheet("abc", "Tasks"))
        assert sheet == Worksheet("1#", "Tasks")
        assert str(recorder.last.url) == f"{API}abc?method=worksheet.insert"

    def test_rename_sheet(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        assert asyncio.run(sheet_client.rename_sheet("abc", "Old", "New")) is True
        assert form_keys(recorder.last) == ["old_name", "new_name"]

    def test_delete_sheet(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        assert asyncio.run(sheet_client.delete_sheet("abc", "Tasks")) is True
        assert recorder.last.url.params["method"] == "worksheet.delete"
        assert form(recorder.last) == {"worksheet_name": "Tasks"}


class TestColumnsAndRows:
    """Test REST column and row operations."""

    def test_add_columns(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        assert asyncio.run(sheet_client.add_columns("W", "S", ["Name", "Age"]))
        assert str(recorder.last.url) == f"{API}workbooks/W/sheets/S/columns"
        assert json_body(recorder.last) == {"columns": ["Name", "Age"]}

    def test_remove_columns(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        asyncio.run(sheet_client.remove_columns("W", "S", [2, 3]))
        assert recorder.last.method == "DELETE"
        assert json_body(recorder.last) == {"columns": [2, 3]}

    def test_add_row(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        asyncio.run(sheet_client.add_row("W", "S", ["Alice", 30]))
        assert recorder.last.headers["Content-Type"] == "application/json"
        assert json_body(recorder.last) == {"data": [["Alice", 30]]}

    def test_update_cell(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        asyncio.run(sheet_client.update_cell("W", "S", 2, 3, "x"))
        assert recorder.last.method == "PATCH"
        assert json_body(recorder.last) == {"data": [{"row": 2, "col": 3, "value": "x"}]}

    def test_delete_row(self, sheet_client, recorder):
        recorder.add(httpx.Response(200))
        asyncio.run(sheet_client.delete_row("W", "S", 4))
        assert str(recorder.last.url) == f"{API}workbooks/W/sheets/S/rows/4"

    def test_invalid_row_index(self, sheet_client, recorder):
        with pytest.raises(InvalidArgumentError, match="row_index"):
            asyncio.run(sheet_client.delete_row("W", "S", 0))
        assert recorder.requests == []


class TestTables:
    """Test table operations."""

    def test_list_tables_absent_field(self, sheet_client, recorder):
        """Should return an empty list when tables is missing."""
        recorder.add({"status": "success"})
        assert asyncio.run(sheet_client.list_tables("RES")) == []
        assert str(recorder.last.url) == f"{API}RES?method=table.list"

    def test_list_tables(self, sheet_client, recorder):
        recorder.add(
            {
                "tables": [
                    {
                        "table_name": "Table1",
                        "table_id": 1,
                        "start_row": 1,
                        "start_column": 1,
                        "end_row": 5,
                        "end_column": 3,
                    }
                ]
            }
        )
        assert asyncio.run(sheet_client.list_tables("RES")) == [Table("Table1", 1, 1, 1, 5, 3)]

    def test_create_table(self, sheet_client, recorder):
        """Should send the range and JSON-in-form header names and style."""
        recorder.add({"table_name": "Table1", "table_id": 9})
        table = asyncio.run(
            sheet_client.create_table(
                "RES",
                "Sheet1",
                1,
                1,
                10,
                2,
                contains_header=True,
                header_names=["Name", "Age"],
                table_style={"style": "medium", "banded_rows": True},
            )
        )

        assert table == Table("Table1", 9, 1, 1, 10, 2)
        assert form_keys(recorder.last) == [
            "worksheet_name",
            "start_row",
            "start_column",
            "end_row",
            "end_column",
            "contains_header",
            "header_names",
            "table_style",
        ]
        body = form(recorder.last)
        assert body["contains_header"] == "true"
        assert body["header_names"] == '["Name","Age"]'
        assert body["table_style"] == '{"style":"medium","banded_rows":true}'

    def test_create_table_missing_id(self, sheet_client, recorder):
        recorder.add({"table_name": "Table1"})
        with pytest.raises(MalformedResponseError, match="table_id"):
            asyncio.run(sheet_client.create_table("RES", "Sheet1", 1, 1, 10, 2))

    def test_delete_table(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        assert asyncio.run(sheet_client.delete_table("RES", "Table1")) is True
        assert form(recorder.last) == {"table_name": "Table1", "clear_format": "true"}

    def test_rename_table_headers(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        headers = [HeaderRename("Name", "Full Name")]
        assert asyncio.run(sheet_client.rename_table_headers("RES", "Table1", headers))
        assert form(recorder.last)["data"] == '[{"OldName":"Name","NewName":"Full Name"}]'

    def test_rename_table_headers_requires_headers(self, sheet_client, recorder):
        with pytest.raises(InvalidArgumentError, match="headers"):
            asyncio.run(sheet_client.rename_table_headers("RES", "Table1", []))
        assert recorder.requests == []

    def test_fetch_table_records(self, sheet_client, recorder):
        """Should send criteria as JSON and decode rows."""
        recorder.add({"records": [{"row_index": 2, "Name": "Alice", "Age": 30}]})
        records = asyncio.run(
            sheet_client.fetch_table_records(
                "RES",
                "Table1",
                criteria=[RecordCriteria("Age", ">", 18, "number")],
                criteria_pattern="1",
                column_names=["Name", "Age"],
            )
        )

        assert records == [SheetRecord(2, {"Name": "Alice", "Age": 30})]
        assert form(recorder.last) == {
            "table_name": "Table1",
            "criteria_json": '[{"Key":"Age","Operator":">","Matcher":18,"Type":"number"}]',
            "criteria_pattern": "1",
            "column_names": "Name,Age",
            "render_option": "formatted",
            "count": "50",
            "is_case_sensitive": "true",
        }

    def test_update_table_records_missing_count(self, sheet_client, recorder):
        """Should default a missing affected-row count to zero."""
        recorder.add({"status": "success"})
        count = asyncio.run(
            sheet_client.update_table_records(
                "RES", "Table1", [RecordCriteria("Name", "=", "Bob")], "and", {"Age": 31}
            )
        )
        assert count == 0
        assert form(recorder.last)["data"] == '{"Age":31}'

    def test_update_table_records_requires_criteria(self, sheet_client, recorder):
        with pytest.raises(InvalidArgumentError, match="criteria"):
            asyncio.run(sheet_client.update_table_records("RES", "Table1", [], "and", {"a": 1}))
        assert recorder.requests == []

    def test_delete_table_records(self, sheet_client, recorder):
        recorder.add({"no_of_rows_deleted": 1, "no_of_rows_remaining": 4})
        result = asyncio.run(
            sheet_client.delete_table_records(
                "RES", "Table1", [RecordCriteria("Name", "=", "Bob")], "and", False
            )
        )
        assert result == DeleteResult(1, 4)
        assert form(recorder.last)["is_case_sensitive"] == "false"

    def test_insert_table_columns(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        assert asyncio.run(sheet_client.insert_table_columns("RES", "Table1", ["City"], "Age"))
        assert form(recorder.last) == {
            "table_name": "Table1",
            "column_names": '["City"]',
            "insert_column_after": "Age",
        }

    def test_delete_table_columns_failure_status(self, sheet_client, recorder):
        recorder.add({"status": "failure"})
        assert asyncio.run(sheet_client.delete_table_columns("RES", "Table1", ["City"])) is False


class TestWorksheetRecords:
    """Test worksheet record operations."""

    def test_fetch_worksheet_records_defaults(self, sheet_client, recorder):
        recorder.add({"records": [{"row_index": 2, "Task": "Docs"}]})
        records = asyncio.run(sheet_client.fetch_worksheet_records("RES", "Tasks"))

        assert records == [SheetRecord(2, {"Task": "Docs"})]
        assert recorder.last.url.params["method"] == "worksheet.records.fetch"
        assert form(recorder.last) == {
            "worksheet_name": "Tasks",
            "header_row": "1",
            "column_names": "",
            "render_option": "formatted",
            "records_start_index": "1",
            "count": "50",
            "is_case_sensitive": "true",
        }

    def test_fetch_worksheet_records_requires_name(self, sheet_client, recorder):
        with pytest.raises(InvalidArgumentError, match="worksheet_name"):
            asyncio.run(sheet_client.fetch_worksheet_records("RES", ""))
        assert recorder.requests == []

    def test_add_worksheet_records(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        ok = asyncio.run(
            sheet_client.add_worksheet_records("RES", "Tasks", [{"Task": "Docs", "Priority": 1}])
        )
        assert ok is True
        assert form(recorder.last)["json_data"] == '[{"Task":"Docs","Priority":1}]'

    def test_update_worksheet_records(self, sheet_client, recorder):
        recorder.add({"no_of_affected_rows": 2})
        count = asyncio.run(
            sheet_client.update_worksheet_records(
                "RES", "Tasks", '"Status"="Open"', {"Status": "Done"}
            )
        )
        assert count == 2
        assert form_keys(recorder.last) == [
            "worksheet_name",
            "header_row",
            "criteria",
            "is_case_sensitive",
            "data",
        ]

    def test_delete_worksheet_records(self, sheet_client, recorder):
        """Should decode deleted and remaining counts."""
        recorder.add({"no_of_rows_deleted": 3, "no_of_rows_remaining": 7})
        result = asyncio.run(sheet_client.delete_worksheet_records("RES", "Tasks", row_array=[2, 4]))

        assert result == DeleteResult(deleted=3, remaining=7)
        assert form(recorder.last) == {
            "worksheet_name": "Tasks",
            "header_row": "1",
            "row_array": "[2,4]",
            "delete_rows": "true",
        }

    def test_insert_worksheet_columns(self, sheet_client, recorder):
        recorder.add({"status": "success"})
        ok = asyncio.run(
            sheet_client.insert_worksheet_columns("RES", "Tasks", "Task", ["Owner", "Due"])
        )
        assert ok is True
        assert str(recorder.last.url) == f"{API}RES?method=records.columns.insert"
        assert form(recorder.last)["column_names"] == '["Owner","Due"]'

    def test_server_error_on_records(self, sheet_client, recorder):
        recorder.add(httpx.Response(500, text="Internal error"))
        with pytest.raises(RemoteApiError) as exc_info:
            asyncio.run(sheet_client.fetch_worksheet_records("RES", "Tasks"))
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "Internal error"
