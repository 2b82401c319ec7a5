"""Response decoding for the Zoho Sheet API.

Each endpoint answers with one of a handful of JSON shapes. The helpers
here check the HTTP status, then map a payload onto the SDK's dataclasses
through fixed field tables. Decoding is all-or-nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from zoho_sheet.exceptions import MalformedResponseError, RemoteApiError
from zoho_sheet.sheets.models import DeleteResult, SheetRecord, Table, Workbook, Worksheet

logger = logging.getLogger(__name__)

T = TypeVar("T")

# API field -> (attribute, required)
WORKBOOK_FIELDS = {
    "resource_id": ("id", True),
    "workbook_name": ("name", True),
    "workbook_url": ("url", False),
    "created_by": ("created_by", False),
    "created_time": ("created_time", False),
    "last_modified_time": ("last_modified_time", False),
}

WORKSHEET_FIELDS = {
    "id": ("id", True),
    "name": ("name", True),
}

TABLE_FIELDS = {
    "table_name": ("table_name", True),
    "table_id": ("table_id", True),
    "start_row": ("start_row", True),
    "start_column": ("start_column", True),
    "end_row": ("end_row", True),
    "end_column": ("end_column", True),
}

TABLE_INT_FIELDS = {"table_id", "start_row", "start_column", "end_row", "end_column"}


def check_response(response: httpx.Response) -> dict[str, Any]:
    """Validate the HTTP status and parse the JSON body.

    Args:
        response: Raw API response.

    Returns:
        Parsed JSON object (``{}`` for an empty body).

    Raises:
        RemoteApiError: If the status is not 2xx.
        MalformedResponseError: If the body is not a JSON object.
    """
    if not response.is_success:
        logger.debug(f"API call failed with status {response.status_code}")
        raise RemoteApiError(response.status_code, response.text)

    if not response.content.strip():
        return {}

    try:
        payload = response.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {response.text}") from e

    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected a JSON object, got: {response.text}")
    return payload


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise MalformedResponseError(f"Field '{name}' is not an integer: {value!r}", field=name)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Field '{name}' is not an integer: {value!r}", field=name
        ) from e


def _map_fields(
    item: Any, fields: dict[str, tuple[str, bool]], entity: str
) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise MalformedResponseError(f"Expected {entity} object, got: {item!r}")

    values = {}
    for api_name, (attr, required) in fields.items():
        value = item.get(api_name)
        if value is None:
            if required:
                raise MalformedResponseError(
                    f"{entity} is missing required field '{api_name}'", field=api_name
                )
            continue
        values[attr] = value
    return values


def decode_workbook(item: Any) -> Workbook:
    values = _map_fields(item, WORKBOOK_FIELDS, "Workbook")
    return Workbook(**{k: str(v) for k, v in values.items()})


def decode_worksheet(item: Any) -> Worksheet:
    values = _map_fields(item, WORKSHEET_FIELDS, "Worksheet")
    return Worksheet(id=str(values["id"]), name=str(values["name"]))


def decode_table(item: Any) -> Table:
    values = _map_fields(item, TABLE_FIELDS, "Table")
    for name in TABLE_INT_FIELDS:
        values[name] = _as_int(values[name], name)
    values["table_name"] = str(values["table_name"])
    return Table(**values)


def decode_list(
    payload: dict[str, Any],
    field: str,
    decode_item: Callable[[Any], T],
    required: bool = False,
) -> list[T]:
    """Decode a named array field.

    An absent field yields an empty list unless ``required`` is set, in
    which case the payload is rejected as malformed.
    """
    items = payload.get(field)
    if items is None:
        if required:
            raise MalformedResponseError(f"Missing field: {field}", field=field)
        return []
    if not isinstance(items, list):
        raise MalformedResponseError(f"Field '{field}' is not a list", field=field)
    return [decode_item(item) for item in items]


def decode_inserted_worksheet(payload: dict[str, Any]) -> Worksheet:
    """Pick the newly inserted sheet out of a ``worksheet.insert`` response."""
    new_name = payload.get("new_worksheet_name")
    if new_name is None:
        raise MalformedResponseError(
            "Response is missing required field 'new_worksheet_name'",
            field="new_worksheet_name",
        )

    sheets = payload.get("worksheet_names")
    if not isinstance(sheets, list):
        raise MalformedResponseError(
            "Response is missing required field 'worksheet_names'", field="worksheet_names"
        )

    for sheet in sheets:
        if isinstance(sheet, dict) and sheet.get("worksheet_name") == new_name:
            if sheet.get("worksheet_id") is None:
                raise MalformedResponseError(
                    "Worksheet is missing required field 'worksheet_id'", field="worksheet_id"
                )
            return Worksheet(id=str(sheet["worksheet_id"]), name=str(sheet["worksheet_name"]))

    raise MalformedResponseError(f"Inserted worksheet '{new_name}' not found in response")


def decode_count(payload: dict[str, Any], field: str) -> int:
    """Read an optional count field, defaulting to 0."""
    value = payload.get(field)
    if value is None:
        return 0
    return _as_int(value, field)


def decode_affected_rows(payload: dict[str, Any]) -> int:
    return decode_count(payload, "no_of_affected_rows")


def decode_delete_result(payload: dict[str, Any]) -> DeleteResult:
    return DeleteResult(
        deleted=decode_count(payload, "no_of_rows_deleted"),
        remaining=decode_count(payload, "no_of_rows_remaining"),
    )


def decode_status(payload: dict[str, Any]) -> bool:
    """True iff the payload's ``status`` is ``"success"`` (any case)."""
    status = payload.get("status")
    return status is not None and str(status).lower() == "success"


def decode_records(
    payload: dict[str, Any], row_index_field: str = "row_index"
) -> list[SheetRecord]:
    """Decode ``records`` into rows keyed by column name.

    Every property except the row-index field becomes a column entry; the
    column set varies per table, so properties are enumerated dynamically.
    """

    def decode_record(item: Any) -> SheetRecord:
        if not isinstance(item, dict):
            raise MalformedResponseError(f"Expected record object, got: {item!r}")
        row_index = item.get(row_index_field)
        return SheetRecord(
            row_index=_as_int(row_index, row_index_field) if row_index is not None else 0,
            data={k: v for k, v in item.items() if k != row_index_field},
        )

    return decode_list(payload, "records", decode_record)
