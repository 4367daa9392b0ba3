"""Note store data transfer objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class Resource:
    """A binary attachment, referenced from the note body by ``hex_hash``."""

    data: bytes
    body_hash: bytes
    mime: str
    source_url: Optional[str] = None
    attachment: bool = False
    client_will_index: bool = False
    guid: Optional[str] = None
    # SDK object this resource was read from; None for new resources.
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def hex_hash(self) -> str:
        return self.body_hash.hex()


@dataclass
class Note:
    """Full note, mutated in place when rectified."""

    guid: Optional[str]
    title: Optional[str]
    content: Optional[str]
    resources: List[Resource] = field(default_factory=list)
    created: Optional[int] = None  # epoch ms
    updated: Optional[int] = None  # epoch ms
    notebook_guid: Optional[str] = None
    content_hash: Optional[bytes] = None
    content_length: Optional[int] = None
    raw: Any = field(default=None, repr=False, compare=False)

    def add_resource(self, resource: Resource) -> None:
        self.resources.append(resource)

    def replace_content(self, content: str) -> None:
        """Swap the body; the service recomputes hash and length on update."""
        self.content = content
        self.content_hash = None
        self.content_length = None


@dataclass(frozen=True)
class Notebook:
    guid: str
    name: str


@dataclass(frozen=True)
class NoteFilter:
    notebook_guid: Optional[str] = None


@dataclass(frozen=True)
class NoteMetadata:
    """Lightweight page entry returned by ``find_notes_metadata``."""

    guid: str
    title: Optional[str]
    created: Optional[int]
    updated: Optional[int]
    update_sequence_num: Optional[int] = None


@dataclass(frozen=True)
class NotesMetadataPage:
    notes: List[NoteMetadata]
    start_index: int
    total_notes: int
