from dataclasses import dataclass, field
from pathlib import Path
from typing import Self

import pydantic.dataclasses

from grantsync.config import Format, dump_path, load_path, parse_python
from grantsync.resource import GrantState


@pydantic.dataclasses.dataclass
class StateEntry:
    id: str
    roles: list[str] = field(default_factory=list)


@dataclass
class StateStore:
    """Persisted grant ids and declared roles, keyed by grant name.

    Only the id and the roles are stored. Privilege and grant option are
    recovered from the id whenever an entry is read.
    """

    path: Path
    format: Format | None = None
    entries: dict[str, StateEntry] = field(default_factory=dict)

    @classmethod
    def open(cls, path: Path, format: Format | None = None) -> Self:
        store = cls(path, format)
        store.load()
        return store

    def load(self) -> None:
        data = load_path(self.path, self.format)
        self.entries = parse_python(data, dict[str, StateEntry])

    def save(self) -> None:
        data = {
            name: {"id": entry.id, "roles": sorted(entry.roles)}
            for name, entry in sorted(self.entries.items())
        }
        dump_path(data, self.path, self.format)

    def names(self) -> list[str]:
        return sorted(self.entries)

    def get(self, name: str) -> GrantState | None:
        entry = self.entries.get(name)
        if entry is None:
            return None
        return GrantState.from_id(entry.id, frozenset(entry.roles))

    def put(self, name: str, state: GrantState) -> None:
        self.entries[name] = StateEntry(id=state.id, roles=sorted(state.roles))

    def remove(self, name: str) -> None:
        self.entries.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self.entries
