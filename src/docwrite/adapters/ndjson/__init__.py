"""Newline-delimited JSON operation files."""

from __future__ import annotations

from .schema import InsertLine, OperationLine, UpdateLine, parse_operation_lines

__all__ = ["InsertLine", "OperationLine", "UpdateLine", "parse_operation_lines"]
