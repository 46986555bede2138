"""
Key hashing for partition assignment.

xxHash64 is fast and stable across processes and platforms, which is what
partition assignment needs. It is NOT a cryptographic hash: it offers no
resistance to crafted input, so never use it for security decisions.
"""

from typing import Any

from xxhash import xxh64_intdigest

# Hash values are unsigned 64-bit integers.
UINT64_MASK = (1 << 64) - 1


def canonical_key(key: Any) -> Any:
    """
    Collapse numerics that compare equal onto one representative.

    Python treats True, 1 and 1.0 as the same dict key, so they must also
    share a hash: bools and integral floats become int.
    """
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float) and key.is_integer():
        return int(key)
    return key


def key_to_bytes(key: Any) -> bytes:
    """
    Canonical byte encoding of a key.

    bytes pass through, str is UTF-8 encoded, everything else uses
    str(canonical_key(key)).
    Different keys may share an encoding (1 and "1"); that is just another
    collision and only affects which partition they share.
    """
    if isinstance(key, bytes):
        return key
    if isinstance(key, str):
        return key.encode("utf-8")
    return str(canonical_key(key)).encode("utf-8")


class Hasher:
    """
    Deterministic, non-cryptographic 64-bit key hasher.

    Integer keys (bools and integral floats included, see canonical_key)
    can pass through unhashed, like a plain integer-keyed hash partitioner:
    dense id ranges then spread perfectly evenly across buckets. All other
    keys go through xxHash64 seeded with ``seed``.

    Collisions are expected; nothing downstream assumes injectivity.
    """

    def __init__(self, seed: int = 0, integer_passthrough: bool = True):
        if seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")
        self.seed = seed & UINT64_MASK
        self.integer_passthrough = integer_passthrough

    def __repr__(self) -> str:
        return f"Hasher(seed={self.seed}, integer_passthrough={self.integer_passthrough})"

    def hash(self, key: Any) -> int:
        """Hash a key to an unsigned 64-bit integer."""
        key = canonical_key(key)
        if self.integer_passthrough and isinstance(key, int):
            return (key ^ self.seed) & UINT64_MASK
        return xxh64_intdigest(key_to_bytes(key), seed=self.seed)

    def bucket(self, key: Any, n: int) -> int:
        """Bucket index hash(key) mod n."""
        if n <= 0:
            raise ValueError(f"bucket count must be positive, got {n}")
        return self.hash(key) % n
