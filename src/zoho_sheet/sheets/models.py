"""Zoho Sheet domain objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple


@dataclass
class Workbook:
    """Represents a Zoho Sheet workbook."""

    id: str
    name: str
    url: str | None = None
    created_by: str | None = None
    created_time: str | None = None
    last_modified_time: str | None = None


@dataclass
class Worksheet:
    """Represents a worksheet within a workbook."""

    id: str
    name: str


@dataclass
class Table:
    """Rectangular table region within a worksheet."""

    table_name: str
    table_id: int
    start_row: int
    start_column: int
    end_row: int
    end_column: int


@dataclass
class RecordCriteria:
    """A single filter predicate, evaluated server-side.

    Several criteria are combined by a criteria pattern such as
    ``"and"``, ``"or"`` or ``"(1 and 2) or 3"``.
    """

    key: str
    operator: str
    matcher: Any
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "Key": self.key,
            "Operator": self.operator,
            "Matcher": self.matcher,
            "Type": self.type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordCriteria:
        return cls(
            key=data["Key"],
            operator=data["Operator"],
            matcher=data.get("Matcher"),
            type=data.get("Type"),
        )


@dataclass
class HeaderRename:
    """Table header rename instruction."""

    old_name: str
    new_name: str

    def to_dict(self) -> dict[str, str]:
        return {"OldName": self.old_name, "NewName": self.new_name}


@dataclass
class SheetRecord:
    """A row of a table or worksheet keyed by column name."""

    row_index: int = 0
    data: dict[str, Any] = field(default_factory=dict)


class DeleteResult(NamedTuple):
    """Row counts reported by a records delete call."""

    deleted: int
    remaining: int
