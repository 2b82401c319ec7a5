"""Map dataclass instances to and from SheetRecord rows.

Example:
    >>> @dataclass
    ... class TaskItem:
    ...     task_name: str
    ...     priority: int = 0
    >>> records = from_objects([TaskItem("Write docs", 2)])
    >>> await client.add_worksheet_records(resource_id, "Tasks", [r.data for r in records])
    >>> rows = await client.fetch_worksheet_records(resource_id, "Tasks")
    >>> tasks = to_objects(TaskItem, rows)

Values that cannot be converted to a field's annotated type are reported
together in a RecordConversionError rather than skipped.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, TypeVar

from zoho_sheet.exceptions import RecordConversionError
from zoho_sheet.sheets.models import SheetRecord

T = TypeVar("T")

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}


def from_object(obj: Any, row_index: int = 0) -> SheetRecord:
    """Copy an object's fields into a SheetRecord.

    Args:
        obj: Dataclass instance, or any object with public attributes.
        row_index: Row index to attach to the record.

    Returns:
        SheetRecord with one entry per field, in declaration order.
    """
    if obj is None:
        raise ValueError("obj must not be None")

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    else:
        data = {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    return SheetRecord(row_index=row_index, data=data)


def from_objects(objects: list[Any] | None) -> list[SheetRecord]:
    """Map objects to records numbered from 1."""
    return [from_object(obj, index) for index, obj in enumerate(objects or [], start=1)]


def _unwrap_optional(target: Any) -> Any:
    origin = typing.get_origin(target)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(target) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return target


def _convert(value: Any, target: Any) -> Any:
    target = _unwrap_optional(target)

    if target is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError("not a boolean")

    if target is int:
        if isinstance(value, bool):
            raise ValueError("booleans are not integers")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("not a whole number")
            return int(value)
        return int(str(value).strip()) if isinstance(value, str) else int(value)

    if target is float:
        return float(value)

    if target is str:
        return value if isinstance(value, str) else str(value)

    return value


def to_object(cls: type[T], record: SheetRecord) -> T:
    """Build a dataclass instance from a record.

    Fields missing from the record, or holding ``None``, keep their
    defaults.

    Raises:
        RecordConversionError: If any value fails conversion.
        TypeError: If a field without a default is missing from the record.
    """
    if record is None:
        raise ValueError("record must not be None")
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} is not a dataclass")

    hints = typing.get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    errors: list[tuple[str, object, str]] = []

    for f in dataclasses.fields(cls):
        value = record.data.get(f.name)
        if value is None or not f.init:
            continue
        try:
            kwargs[f.name] = _convert(value, hints.get(f.name, Any))
        except (TypeError, ValueError) as e:
            errors.append((f.name, value, str(e)))

    if errors:
        raise RecordConversionError(errors)
    return cls(**kwargs)


def to_objects(cls: type[T], records: list[SheetRecord] | None) -> list[T]:
    return [to_object(cls, record) for record in records or []]
