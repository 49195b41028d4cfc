# Google SheetDB MCP Server
# File: models.py
# Version: v1

"""Domain models used by the SheetDB query engine.

Rows are snapshots read from a tab: a header-keyed mapping of string cells
plus the row's 1-based position in the sheet (the header occupies
position 1, so the first data row is position 2).

Filters are conjunctive mappings from column name to a ``Condition``.
A condition is either a ``Literal`` (loose equality) or a ``Comparison``
(operator + value).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

ROW_POSITION_KEY = "_row"

OPERATORS = frozenset({"=", "!=", ">", "<", ">=", "<=", "contains"})

ASC = "asc"
DESC = "desc"


class Row(Mapping):
    """One data record plus its position in the backing tab.

    Behaves as a read-only mapping over the cell values, so the evaluation
    helpers accept a ``Row`` and a plain ``dict`` interchangeably.
    """

    __slots__ = ("position", "_values")

    def __init__(self, values: Mapping[str, str], position: int) -> None:
        self._values: Dict[str, str] = dict(values)
        self.position = int(position)

    @classmethod
    def from_cells(cls, header: List[str], cells: List[Any], position: int) -> "Row":
        """Build a row from a raw sheet line, padding missing cells with ''."""
        values: Dict[str, str] = {}
        for idx, column in enumerate(header):
            cell = cells[idx] if idx < len(cells) else ""
            values[column] = "" if cell is None else str(cell)
        return cls(values, position)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Row):
            return self.position == other.position and self._values == other._values
        return Mapping.__eq__(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Row(position={self.position}, values={self._values!r})"

    @property
    def is_blank(self) -> bool:
        return all(v == "" for v in self._values.values())

    def to_dict(self, include_position: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self._values)
        if include_position:
            out[ROW_POSITION_KEY] = self.position
        return out


def field_value(row: Mapping, name: str) -> Any:
    """Read one field of a row; ``_row`` resolves to the position of a ``Row``."""
    if name == ROW_POSITION_KEY and isinstance(row, Row):
        return row.position
    return row.get(name)


@dataclass(frozen=True)
class Literal:
    """Bare value condition; matches on loose string/number equality."""

    value: Any


@dataclass(frozen=True)
class Comparison:
    """``{operator, value}`` condition evaluated with value coercion."""

    operator: str
    value: Any


Condition = Union[Literal, Comparison]
Filter = Dict[str, Condition]


@dataclass(frozen=True)
class OrderKey:
    column: str
    direction: str = ASC

    def __post_init__(self) -> None:
        direction = str(self.direction or ASC).strip().lower()
        object.__setattr__(self, "direction", DESC if direction == DESC else ASC)

    @property
    def descending(self) -> bool:
        return self.direction == DESC


@dataclass
class SelectOptions:
    """Post-filter shaping applied by ``SheetDB.select``."""

    order_by: List[OrderKey] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    select_fields: Optional[List[str]] = None

    def __post_init__(self) -> None:
        for name in ("limit", "offset"):
            value = getattr(self, name)
            if value is not None and int(value) < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.select_fields is not None:
            out["select_fields"] = list(self.select_fields)
        if self.order_by:
            out["order_by"] = [
                {"column": k.column, "direction": k.direction} for k in self.order_by
            ]
        if self.limit is not None:
            out["limit"] = self.limit
        if self.offset is not None:
            out["offset"] = self.offset
        return out


# ---------------------------------------------------------------------------
# Loose (JSON-style) input normalisation
# ---------------------------------------------------------------------------


def normalize_condition(raw: Any) -> Condition:
    """Turn ``25`` / ``{"op": ">", "value": 18}`` into a tagged condition."""
    if isinstance(raw, (Literal, Comparison)):
        return raw
    if isinstance(raw, Mapping) and ("op" in raw or "operator" in raw):
        op = raw.get("op", raw.get("operator"))
        return Comparison(operator=str(op).strip().lower(), value=raw.get("value"))
    return Literal(raw)


def normalize_filter(where: Optional[Mapping[str, Any]]) -> Filter:
    if not where:
        return {}
    return {str(column): normalize_condition(cond) for column, cond in where.items()}


def normalize_order_by(order_by: Any) -> List[OrderKey]:
    """Accept OrderKey objects, ``{"column", "direction"}`` dicts or "col desc" strings."""
    if not order_by:
        return []
    if isinstance(order_by, (str, Mapping, OrderKey)):
        order_by = [order_by]

    keys: List[OrderKey] = []
    for item in order_by:
        if isinstance(item, OrderKey):
            keys.append(item)
        elif isinstance(item, Mapping):
            if not item.get("column"):
                raise ValueError(f"order_by entry {dict(item)!r} is missing the 'column' key")
            keys.append(OrderKey(column=str(item["column"]), direction=item.get("direction", ASC)))
        else:
            parts = str(item).split()
            if not parts:
                continue
            if len(parts) > 1 and parts[-1].lower() in (ASC, DESC):
                column, direction = " ".join(parts[:-1]), parts[-1]
            else:
                column, direction = " ".join(parts), ASC
            keys.append(OrderKey(column=column, direction=direction))
    return keys


def make_select_options(
    order_by: Any = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    select_fields: Optional[List[str]] = None,
) -> SelectOptions:
    return SelectOptions(
        order_by=normalize_order_by(order_by),
        limit=int(limit) if limit is not None else None,
        offset=int(offset) if offset is not None else None,
        select_fields=list(select_fields) if select_fields else None,
    )
