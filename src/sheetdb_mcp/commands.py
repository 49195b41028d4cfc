# Google SheetDB MCP Server
# File: commands.py
# Version: v1

"""Structured table commands.

``Command`` is a closed union with one dataclass per operation. Commands
are produced by ``query.translate`` (or built directly by callers),
consumed once by ``SheetDB.execute`` and then discarded.

The ``table`` attribute records the identifier named in the statement for
diagnostics only; ``SheetDB`` always acts on the tab it is bound to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Union

from .models import Filter, SelectOptions


@dataclass(frozen=True)
class CreateTable:
    kind: ClassVar[str] = "createTable"

    columns: List[str]
    table: Optional[str] = None


@dataclass(frozen=True)
class DropTable:
    kind: ClassVar[str] = "dropTable"

    table: Optional[str] = None


@dataclass(frozen=True)
class TruncateTable:
    kind: ClassVar[str] = "truncateTable"

    table: Optional[str] = None


@dataclass(frozen=True)
class InsertOne:
    kind: ClassVar[str] = "insertOne"

    obj: Dict[str, Any]
    table: Optional[str] = None


@dataclass(frozen=True)
class InsertMany:
    kind: ClassVar[str] = "insertMany"

    rows: List[Dict[str, Any]]
    table: Optional[str] = None


@dataclass(frozen=True)
class Select:
    kind: ClassVar[str] = "select"

    where: Filter = field(default_factory=dict)
    options: SelectOptions = field(default_factory=SelectOptions)
    table: Optional[str] = None


@dataclass(frozen=True)
class Update:
    kind: ClassVar[str] = "update"

    where: Filter
    new_data: Dict[str, Any]
    table: Optional[str] = None


@dataclass(frozen=True)
class Delete:
    kind: ClassVar[str] = "delete"

    where: Filter
    table: Optional[str] = None


@dataclass(frozen=True)
class GetTables:
    kind: ClassVar[str] = "getTables"


@dataclass(frozen=True)
class ShowTableDetail:
    kind: ClassVar[str] = "showTableDetail"


Command = Union[
    CreateTable,
    DropTable,
    TruncateTable,
    InsertOne,
    InsertMany,
    Select,
    Update,
    Delete,
    GetTables,
    ShowTableDetail,
]
