"""Data models returned by an identity disk."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Sequence

from idz.errors import StorageError


@dataclass
class Chunk:
    """A piece of text with its identifier and JSON metadata."""

    chunk_id: str
    content: str
    metadata: Any = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Chunk":
        """Build a chunk from a (chunk_id, content, metadata) row.

        Metadata that is not valid JSON becomes an empty object.
        """
        chunk_id, content, metadata_text = row[0], row[1], row[2]
        if not isinstance(metadata_text, str):
            raise StorageError(f"metadata of chunk {chunk_id} is not text")
        try:
            metadata = json.loads(metadata_text)
        except ValueError:
            metadata = {}
        return cls(chunk_id=chunk_id, content=content, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        """Return the chunk as a plain dictionary."""
        return {
            "chunk_id": self.chunk_id,
            "content": self.content,
            "metadata": self.metadata,
        }


@dataclass
class SearchResult:
    """A chunk found by a search, with its distance to the query."""

    chunk: Chunk
    distance: float

    def to_dict(self) -> dict[str, Any]:
        """Return the result as a plain dictionary."""
        return {"chunk": self.chunk.to_dict(), "distance": self.distance}