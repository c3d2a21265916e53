from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"


class Outcome(str, Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILURE = "failure"


@dataclass(frozen=True)
class Entry:
    name: str
    path: str
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class Listing:
    location: str
    dirs: Tuple[Entry, ...] = field(default_factory=tuple)
    files: Tuple[Entry, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, location: str) -> "Listing":
        return cls(location=location)

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self.dirs + self.files

    def is_empty(self) -> bool:
        return not self.dirs and not self.files
