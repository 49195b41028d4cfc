# Google SheetDB MCP Server
# File: query/__init__.py
# Version: v1

"""Query translation and row evaluation.

The four evaluation primitives (``coerce``, ``matches``, ``sort_rows``,
``project``) are usable on their own by callers that build structured
filters directly instead of going through ``translate``.
"""

from __future__ import annotations

from .coercion import coerce, is_date_column
from .predicates import filter_rows, matches
from .projection import project
from .sorting import sort_rows
from .translator import translate

__all__ = [
    "coerce",
    "filter_rows",
    "is_date_column",
    "matches",
    "project",
    "sort_rows",
    "translate",
]
