# app/core/bots/facility_bot/reference_data.py
"""
Reference data: JSON loader + normalized lookup index.

Three files describe the campus:

- ``valid-to-location.json``    ``[{"location": "Lobby"}, ...]``
- ``valid-from-location.json``  ``[{"location": "Gate 1"}, ...]``
- ``from-to-location.json``     ``[{"fromLocation": ..., "toLocation": ..., "path": ...}, ...]``

They are read once into an immutable index keyed by the casefolded name
and re-read only when a file's mtime changes.  A missing or malformed file
raises :class:`ReferenceDataUnavailable`; there is no fallback table.
"""
from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from app.core.engine.domain import LocationEntry, LocationRole, PathEntry
from app.core.engine.errors import ReferenceDataUnavailable
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

__all__ = [
    "ReferenceData",
    "ReferenceDataLoader",
    "normalize_location",
    "load_locations",
    "load_paths",
    "get_reference_data",
    "set_reference_loader",
]


# ---------------------------------------------------------------------------
# Name normalization
# ---------------------------------------------------------------------------

def normalize_location(name: str) -> str:
    """Lookup key for a location name: trimmed and lowercased."""
    return (name or "").strip().casefold()


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReferenceData:
    """Read-only lookup tables shared by every turn."""

    to_locations: Mapping[str, LocationEntry]
    from_locations: Mapping[str, LocationEntry]
    paths: Mapping[tuple[str, str], PathEntry]

    def locations_for(self, role: LocationRole) -> Mapping[str, LocationEntry]:
        if role == LocationRole.TO:
            return self.to_locations
        return self.from_locations

    @classmethod
    def from_entries(
        cls,
        to_locations: list[LocationEntry],
        from_locations: list[LocationEntry],
        paths: list[PathEntry],
    ) -> "ReferenceData":
        """Build the index from ordered entries.

        On a case-insensitive collision the first entry wins, so lookups
        behave exactly like a front-to-back scan of the original list.
        """
        return cls(
            to_locations=MappingProxyType(_index_locations(to_locations)),
            from_locations=MappingProxyType(_index_locations(from_locations)),
            paths=MappingProxyType(_index_paths(paths)),
        )


def _index_locations(entries: list[LocationEntry]) -> dict[str, LocationEntry]:
    out: dict[str, LocationEntry] = {}
    for entry in entries:
        out.setdefault(normalize_location(entry.location), entry)
    return out


def _index_paths(entries: list[PathEntry]) -> dict[tuple[str, str], PathEntry]:
    out: dict[tuple[str, str], PathEntry] = {}
    for entry in entries:
        key = (normalize_location(entry.from_location), normalize_location(entry.to_location))
        out.setdefault(key, entry)
    return out


# ---------------------------------------------------------------------------
# JSON loading
# ---------------------------------------------------------------------------

def _read_json_list(path: Path) -> list[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ReferenceDataUnavailable(str(path), "file not found") from None
    except json.JSONDecodeError as exc:
        raise ReferenceDataUnavailable(str(path), f"invalid JSON ({exc.msg} at line {exc.lineno})") from None
    except OSError as exc:
        raise ReferenceDataUnavailable(str(path), exc.strerror or type(exc).__name__) from None

    if not isinstance(data, list):
        raise ReferenceDataUnavailable(str(path), "expected a JSON array at top level")
    return data


def _require_str(path: Path, index: int, entry: Any, key: str) -> str:
    if not isinstance(entry, dict) or not isinstance(entry.get(key), str):
        raise ReferenceDataUnavailable(str(path), f"entry {index} is missing string field '{key}'")
    return entry[key]


def load_locations(path: Path) -> list[LocationEntry]:
    """Load a valid-location list (``[{"location": str}, ...]``)."""
    return [
        LocationEntry(location=_require_str(path, i, entry, "location"))
        for i, entry in enumerate(_read_json_list(path))
    ]


def load_paths(path: Path) -> list[PathEntry]:
    """Load the path table (``[{"fromLocation", "toLocation", "path"}, ...]``)."""
    return [
        PathEntry(
            from_location=_require_str(path, i, entry, "fromLocation"),
            to_location=_require_str(path, i, entry, "toLocation"),
            path=_require_str(path, i, entry, "path"),
        )
        for i, entry in enumerate(_read_json_list(path))
    ]


# ---------------------------------------------------------------------------
# Loader with change detection
# ---------------------------------------------------------------------------

class ReferenceDataLoader:
    """
    Lazily builds :class:`ReferenceData` on first use and rebuilds it only
    when one of the source files changes on disk.
    """

    def __init__(self, to_path: str | Path, from_path: str | Path, paths_path: str | Path):
        self._files = (Path(to_path), Path(from_path), Path(paths_path))
        self._data: ReferenceData | None = None
        self._mtimes: tuple[float, ...] | None = None
        self._lock = threading.Lock()

    def _current_mtimes(self) -> tuple[float, ...]:
        mtimes = []
        for path in self._files:
            try:
                mtimes.append(os.stat(path).st_mtime)
            except FileNotFoundError:
                raise ReferenceDataUnavailable(str(path), "file not found") from None
            except OSError as exc:
                raise ReferenceDataUnavailable(str(path), exc.strerror or type(exc).__name__) from None
        return tuple(mtimes)

    def get(self) -> ReferenceData:
        """Return the current index, reloading if any file changed."""
        mtimes = self._current_mtimes()
        with self._lock:
            if self._data is None or mtimes != self._mtimes:
                to_path, from_path, paths_path = self._files
                self._data = ReferenceData.from_entries(
                    load_locations(to_path),
                    load_locations(from_path),
                    load_paths(paths_path),
                )
                self._mtimes = mtimes
                logger.info(
                    "Reference data loaded: to=%d from=%d paths=%d",
                    len(self._data.to_locations),
                    len(self._data.from_locations),
                    len(self._data.paths),
                )
            return self._data


_loader: ReferenceDataLoader | None = None


def set_reference_loader(loader: ReferenceDataLoader | None) -> None:
    """Replace the process-wide loader (``None`` = rebuild from settings on next use)."""
    global _loader
    _loader = loader


def get_reference_data() -> ReferenceData:
    """Reference index for the paths configured in settings."""
    global _loader
    if _loader is None:
        from app.config import settings
        _loader = ReferenceDataLoader(
            settings.valid_to_locations_path,
            settings.valid_from_locations_path,
            settings.paths_table_path,
        )
    return _loader.get()
