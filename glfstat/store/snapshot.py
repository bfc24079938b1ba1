"""Durable snapshot collaborators for the domain store.

The domain store serializes its entire state after every mutation and
reads it back once at startup. Layout on disk::

    {"players": [[id, player], ...], "rounds": [[id, round], ...]}
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Protocol, Tuple

from glfstat.errors import PersistenceError

Entry = Tuple[str, dict]


@dataclass
class Snapshot:
    players: List[Entry] = field(default_factory=list)
    rounds: List[Entry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "players": [[entity_id, data] for entity_id, data in self.players],
            "rounds": [[entity_id, data] for entity_id, data in self.rounds],
        }

    @staticmethod
    def from_dict(data: Any) -> "Snapshot":
        if not isinstance(data, dict):
            raise PersistenceError("snapshot root must be an object")
        return Snapshot(
            players=_entries(data.get("players", []), "players"),
            rounds=_entries(data.get("rounds", []), "rounds"),
        )


def _entries(raw: Any, name: str) -> List[Entry]:
    if not isinstance(raw, list):
        raise PersistenceError(f"snapshot {name} must be a list of [id, entity] pairs")
    entries: List[Entry] = []
    for item in raw:
        if (
            not isinstance(item, (list, tuple))
            or len(item) != 2
            or not isinstance(item[0], str)
            or not isinstance(item[1], dict)
        ):
            raise PersistenceError(f"malformed {name} entry: {item!r}")
        entries.append((item[0], item[1]))
    return entries


class SnapshotStore(Protocol):
    def load(self) -> Snapshot | None: ...

    def save(self, snapshot: Snapshot) -> None: ...


class JsonFileSnapshotStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Snapshot | None:
        if not self._path.exists():
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"cannot read snapshot {self._path}: {exc}") from exc
        return Snapshot.from_dict(raw)

    def save(self, snapshot: Snapshot) -> None:
        path = self._path
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(snapshot.to_dict(), indent=2), encoding="utf-8"
            )
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"cannot write snapshot {path}: {exc}") from exc


class MemorySnapshotStore:
    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._data = snapshot.to_dict() if snapshot else None
        self.saves = 0

    def load(self) -> Snapshot | None:
        if self._data is None:
            return None
        return Snapshot.from_dict(copy.deepcopy(self._data))

    def save(self, snapshot: Snapshot) -> None:
        self._data = copy.deepcopy(snapshot.to_dict())
        self.saves += 1


__all__ = [
    "JsonFileSnapshotStore",
    "MemorySnapshotStore",
    "Snapshot",
    "SnapshotStore",
]
