"""Where the document database lives and how to reach it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ConfigurationError

DATABASE_FILENAME: Final[str] = "documents.db"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def database_uri(self) -> str:
        """Create the data directory if needed and return the SQLite URI inside it."""

        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{data_dir / DATABASE_FILENAME}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _parse_bool(name: str, value: str | None) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def get_storage_config() -> StorageConfig:
    """Read ``DOCWRITE_DATA_DIR``, defaulting to the user's data directory."""

    env_dir = os.getenv("DOCWRITE_DATA_DIR")
    if env_dir:
        return StorageConfig(data_dir=Path(env_dir))
    base = os.getenv("XDG_DATA_HOME") or os.getenv("LOCALAPPDATA")
    base_path = Path(base) if base else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base_path / "docwrite")


def get_database_config(
    *, uri: str | None = None, storage: StorageConfig | None = None
) -> DatabaseConfig:
    """Resolve the database URI: explicit ``uri``, then ``DATABASE_URI``, then the data dir."""

    echo = _parse_bool("DOCWRITE_SQL_ECHO", os.getenv("DOCWRITE_SQL_ECHO"))
    resolved = uri or os.getenv("DATABASE_URI")
    if not resolved:
        resolved = (storage or get_storage_config()).database_uri()
    return DatabaseConfig(uri=resolved, echo=echo)
