"""Vector encoding and an in-memory cosine-distance search index."""

from __future__ import annotations

import heapq
import math
import struct
from typing import Iterable, Sequence

from idz.errors import InvalidDataError


def encode_f32(vector: Iterable[float]) -> bytes:
    """Encode a vector as little-endian 32-bit floats."""
    values = list(vector)
    return struct.pack(f"<{len(values)}f", *values)


def decode_f32(blob: bytes) -> list[float]:
    """Decode little-endian 32-bit floats; trailing partial bytes are ignored."""
    count = len(blob) // 4
    return list(struct.unpack_from(f"<{count}f", blob))


def is_f32_signature(model_signature: str) -> bool:
    """Tell whether a model signature stores 32-bit float embeddings."""
    return model_signature.endswith("_fp32") or "_" not in model_signature


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Return one minus the cosine similarity, clamped at zero.

    A zero vector on either side gives a distance of zero.
    """
    if len(a) != len(b):
        raise InvalidDataError(f"vector lengths differ: {len(a)} and {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a)
    norm_b = sum(y * y for y in b)
    if norm_a > 0.0 and norm_b > 0.0:
        return max(1.0 - dot / math.sqrt(norm_a * norm_b), 0.0)
    return 0.0


class CosineIndex:
    """Nearest-neighbour index over vectors of one fixed dimension."""

    def __init__(self) -> None:
        self._items: list[tuple[int, tuple[float, ...]]] = []
        self._dimension: int | None = None

    def _check_dimension(self, values: tuple[float, ...]) -> None:
        if self._dimension is not None and len(values) != self._dimension:
            raise InvalidDataError(
                f"expected a vector of dimension {self._dimension}, got {len(values)}"
            )

    def insert(self, vector: Iterable[float], item_id: int) -> None:
        """Add a vector under the given item id."""
        values = tuple(float(v) for v in vector)
        self._check_dimension(values)
        if self._dimension is None:
            self._dimension = len(values)
        self._items.append((item_id, values))

    def search(self, query: Iterable[float], top_k: int) -> list[tuple[int, float]]:
        """Return up to top_k (item_id, distance) pairs, nearest first."""
        values = tuple(float(v) for v in query)
        self._check_dimension(values)
        scored = (
            (cosine_distance(values, stored), position, item_id)
            for position, (item_id, stored) in enumerate(self._items)
        )
        return [(item_id, distance) for distance, _, item_id in heapq.nsmallest(top_k, scored)]

    def __len__(self) -> int:
        return len(self._items)