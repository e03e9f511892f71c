"""Model-signature parsing and the demo embedding generator."""

from __future__ import annotations

import re

_UNSIGNED = re.compile(r"\+?[0-9]+")
_MAX_DIMENSION = 2**64 - 1


def parse_dimension(model_signature: str, default: int) -> int:
    """Read the embedding dimension from a signature such as "name-1536_fp32".

    The dimension is the text after the last '-' of the part before the first
    '_'. When that is not an unsigned integer, default is returned.
    """
    head = model_signature.split("_", 1)[0]
    tail = head.rsplit("-", 1)[-1]
    if not _UNSIGNED.fullmatch(tail):
        return default
    value = int(tail)
    return value if value <= _MAX_DIMENSION else default


def parse_dtype(model_signature: str) -> str:
    """Return the part of the signature after the first '_', up to the next one."""
    parts = model_signature.split("_")
    return parts[1] if len(parts) > 1 else "unknown"


class DemoRandom:
    """Linear congruential generator used to make placeholder embeddings."""

    _MULTIPLIER = 1103515245
    _INCREMENT = 12345
    _MASK = 0xFFFFFFFF

    def __init__(self, seed: int = 1) -> None:
        self.seed = seed & self._MASK

    def random(self) -> float:
        """Advance the generator and return a value in [0, 1)."""
        self.seed = (self.seed * self._MULTIPLIER + self._INCREMENT) & self._MASK
        return (self.seed >> 16) / 65536.0

    def vector(self, dim: int, scale: float = 1.0) -> list[float]:
        """Return dim values, each a fresh random value times scale."""
        return [self.random() * scale for _ in range(dim)]