"""
Bloom filter over lowercased title prefixes.

Used as an optimistic hint before candidate generation. It never
produces false negatives, so a "not contained" answer is only ever a
hint: ranking always falls back to a full scan.
"""
import logging
import math

logger = logging.getLogger(__name__)

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_MASK_32 = 0xFFFFFFFF


def fnv1a_32(data: bytes) -> int:
    """32-bit FNV-1a hash."""
    h = _FNV_OFFSET
    for b in data:
        h ^= b
        h = (h * _FNV_PRIME) & _MASK_32
    return h


def djb2_32(data: bytes) -> int:
    """32-bit DJB2 hash (xor variant)."""
    h = 5381
    for b in data:
        h = (((h << 5) + h) ^ b) & _MASK_32
    return h


class BloomFilter:
    """
    Fixed-size Bloom filter sized for a capacity and false-positive rate.

    m = -(n * ln p) / (ln 2)^2 bits, k = (m / n) * ln 2 hash functions,
    positions derived by double hashing (h_a + i * h_b) mod m.
    """

    def __init__(self, capacity: int, error_rate: float = 0.01):
        """
        Initialize an empty filter.

        Args:
            capacity: Expected number of distinct items
            error_rate: Target false-positive rate in (0, 1)
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if not 0.0 < error_rate < 1.0:
            raise ValueError(f"error_rate must be in (0, 1), got {error_rate}")

        self.capacity = capacity
        self.error_rate = error_rate

        ln2 = math.log(2)
        self.size_in_bits = math.ceil(-(capacity * math.log(error_rate)) / (ln2 * ln2))
        self.hash_count = math.ceil((self.size_in_bits / capacity) * ln2)
        self._bits = bytearray(math.ceil(self.size_in_bits / 8))

    def add(self, token: str):
        for position in self._positions(token):
            self._bits[position >> 3] |= 1 << (position & 7)

    def might_contain(self, token: str) -> bool:
        for position in self._positions(token):
            if not self._bits[position >> 3] & (1 << (position & 7)):
                return False
        return True

    def __contains__(self, token: str) -> bool:
        return self.might_contain(token)

    def _positions(self, token: str):
        data = token.encode("utf-8")
        hash_a = fnv1a_32(data)
        hash_b = djb2_32(data)
        for i in range(self.hash_count):
            yield (hash_a + i * hash_b) % self.size_in_bits

    @classmethod
    def from_titles(
        cls,
        titles: list[str],
        capacity: int,
        error_rate: float = 0.01
    ) -> "BloomFilter":
        """Build a filter holding every prefix of every lowercased title."""
        bloom = cls(capacity, error_rate)
        for title in titles:
            lower = title.lower()
            for end in range(1, len(lower) + 1):
                bloom.add(lower[:end])
        return bloom
