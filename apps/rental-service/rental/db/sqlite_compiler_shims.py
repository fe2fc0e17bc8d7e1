"""SQLite compilation shim for the PostgreSQL JSONB type.

Installs a compiler for JSONB when the active dialect is SQLite so that
`Base.metadata.create_all()` succeeds against the in-memory test database.
Event payloads are stored as plain JSON text there; no JSONB operators are
emulated.

Usage: imported for side-effects by rental.db.models.
"""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(element, compiler, **kw):  # pragma: no cover - trivial
    return "JSON"
