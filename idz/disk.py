"""Identity disk: a SQLite file of text chunks with vector embeddings."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

from idz.errors import InvalidDataError, NotFoundError, StorageError
from idz.index import CosineIndex, decode_f32, encode_f32, is_f32_signature
from idz.models import Chunk, SearchResult

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

SPEC_VERSION = "1.0"

_CREATE_DB_SQL = (
    """
BEGIN;

CREATE TABLE manifest (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE chunks (
    chunk_id TEXT PRIMARY KEY,
    content TEXT NOT NULL,
    metadata TEXT
);
CREATE UNIQUE INDEX idx_chunks_chunk_id ON chunks(chunk_id);

CREATE TABLE indices (
    index_id INTEGER PRIMARY KEY AUTOINCREMENT,
    chunk_id TEXT NOT NULL,
    index_type TEXT NOT NULL,
    model_signature TEXT NOT NULL,
    data BLOB NOT NULL,
    FOREIGN KEY (chunk_id) REFERENCES chunks (chunk_id) ON DELETE CASCADE
);
CREATE UNIQUE INDEX idx_indices_chunk_model ON indices (chunk_id, model_signature);
CREATE INDEX idx_indices_model_signature ON indices (model_signature);

INSERT INTO manifest (key, value) VALUES ('spec_version', '"""
    + SPEC_VERSION
    + """');

COMMIT;
"""
)

_SELECT_CHUNKS = "SELECT chunk_id, content, metadata FROM chunks"


@contextmanager
def _storage() -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, OSError) as exc:
        raise StorageError(str(exc)) from exc


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise InvalidDataError(f"metadata is not JSON serialisable: {exc}") from exc


def _load_index(
    conn: sqlite3.Connection, model_signature: str
) -> tuple[CosineIndex | None, list[str]]:
    with _storage():
        rows = conn.execute(
            "SELECT chunk_id, data FROM indices WHERE model_signature = ? ORDER BY chunk_id",
            (model_signature,),
        ).fetchall()
    if not rows:
        return None, []
    id_map = [chunk_id for chunk_id, _ in rows]
    if not is_f32_signature(model_signature):
        logger.warning(
            "Unsupported vector type for model signature '%s'. Search will be disabled.",
            model_signature,
        )
        return None, id_map
    index = CosineIndex()
    for position, (_, blob) in enumerate(rows):
        index.insert(decode_f32(blob), position)
    return index, id_map


class IdentityDisk:
    """Chunks and embeddings in a SQLite file, with an in-memory search index.

    Build instances with create, open or open_in_memory.
    """

    def __init__(self, conn: sqlite3.Connection, model_signature: str) -> None:
        self._conn = conn
        self.model_signature = model_signature
        self._index, self._id_map = _load_index(conn, model_signature)

    @classmethod
    def _attach(cls, conn: sqlite3.Connection, model_signature: str) -> "IdentityDisk":
        try:
            return cls(conn, model_signature)
        except BaseException:
            conn.close()
            raise

    @classmethod
    def create(cls, path: PathLike, model_signature: str) -> "IdentityDisk":
        """Create an empty disk at path, replacing any file already there."""
        target = Path(path)
        with _storage():
            if target.exists():
                target.unlink()
            conn = sqlite3.connect(target)
            try:
                conn.executescript(_CREATE_DB_SQL)
            except BaseException:
                conn.close()
                raise
        return cls._attach(conn, model_signature)

    @classmethod
    def open(cls, path: PathLike, model_signature: str) -> "IdentityDisk":
        """Open a disk and index the embeddings stored for model_signature."""
        with _storage():
            conn = sqlite3.connect(path)
        return cls._attach(conn, model_signature)

    @classmethod
    def open_in_memory(cls, path: PathLike, model_signature: str) -> "IdentityDisk":
        """Copy a disk into memory and open the copy; the file is left unchanged."""
        with _storage():
            source = sqlite3.connect(path)
            memory = sqlite3.connect(":memory:")
            try:
                source.backup(memory, pages=5, sleep=0.25)
            except BaseException:
                memory.close()
                raise
            finally:
                source.close()
        return cls._attach(memory, model_signature)

    def add_chunk(
        self,
        content: str,
        embedding: Iterable[float],
        metadata: Any = None,
    ) -> str:
        """Store a chunk with its embedding and return its new chunk id.

        The chunk and embedding are written in one transaction. If no search
        index is loaded, InvalidDataError is raised after the write.
        """
        if not self.model_signature.endswith("_fp32") and "_" not in self.model_signature:
            raise InvalidDataError("Mismatched vector type: expected fp32")
        chunk_id = str(uuid.uuid4())
        metadata_text = "{}" if metadata is None else _to_json(metadata)
        blob = encode_f32(embedding)

        with _storage(), self._conn:
            self._conn.execute(
                "INSERT INTO chunks (chunk_id, content, metadata) VALUES (?, ?, ?)",
                (chunk_id, content, metadata_text),
            )
            self._conn.execute(
                "INSERT INTO indices (chunk_id, index_type, model_signature, data) "
                "VALUES (?, ?, ?, ?)",
                (chunk_id, "vector_embedding", self.model_signature, blob),
            )

        if self._index is None:
            raise InvalidDataError("No supported index loaded.")
        self._index.insert(decode_f32(blob), len(self._id_map))
        self._id_map.append(chunk_id)
        return chunk_id

    def get_chunks(self) -> list[Chunk]:
        """Return every chunk, without embeddings."""
        with _storage():
            rows = self._conn.execute(_SELECT_CHUNKS).fetchall()
        return [Chunk.from_row(row) for row in rows]

    def search(self, query_vector: Iterable[float], top_k: int) -> list[SearchResult]:
        """Return up to top_k chunks nearest to the query, nearest first."""
        if self._index is None:
            return []
        query = decode_f32(encode_f32(query_vector))
        results = []
        for item_id, distance in self._index.search(query, top_k):
            chunk_id = self._id_map[item_id]
            with _storage():
                row = self._conn.execute(
                    _SELECT_CHUNKS + " WHERE chunk_id = ?", (chunk_id,)
                ).fetchone()
            if row is None:
                raise StorageError(f"Query returned no rows for chunk {chunk_id}")
            results.append(SearchResult(Chunk.from_row(row), distance))
        return results

    def update_chunk_metadata(self, chunk_id: str, new_metadata: Any) -> None:
        """Replace the metadata of an existing chunk."""
        metadata_text = _to_json(new_metadata)
        with _storage(), self._conn:
            cursor = self._conn.execute(
                "UPDATE chunks SET metadata = ? WHERE chunk_id = ?",
                (metadata_text, chunk_id),
            )
        if cursor.rowcount == 0:
            raise NotFoundError(chunk_id)

    def get_spec_version(self) -> str:
        """Return the specification version recorded in the manifest."""
        with _storage():
            row = self._conn.execute(
                "SELECT value FROM manifest WHERE key = 'spec_version'"
            ).fetchone()
        if row is None:
            raise StorageError("Query returned no rows for spec_version")
        return row[0]

    def get_index_type_description(self) -> str:
        """Describe the search index currently loaded."""
        if self._index is None:
            return "None (No index loaded or supported for current model signature)"
        return "F32 (Cosine Distance)"

    def close(self) -> None:
        """Close the database connection."""
        with _storage():
            self._conn.close()

    def __enter__(self) -> "IdentityDisk":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()