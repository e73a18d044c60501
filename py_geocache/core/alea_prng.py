"""
Alea PRNG used to derive cache contents from cell coordinates.

Based on Johannes Baagøe's Alea algorithm. A generator seeded with the same
string always yields the same sequence, on any machine and across restarts,
which is what keeps the procedural world stable.
"""

_TWO_POW_32 = 0x100000000
_TWO_POW_NEG_32 = 2.3283064365386963e-10


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class Mash:
    """Alea's string hash; state carries over between calls."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data) -> float:
        n = self.n
        for char in str(data):
            n += ord(char)
            h = 0.02519603282416938 * n
            n = _uint32(h)
            h -= n
            h *= n
            n = _uint32(h)
            h -= n
            n += h * _TWO_POW_32
        self.n = n
        return _uint32(n) * _TWO_POW_NEG_32


class AleaPRNG:
    """Seeded generator producing floats in [0, 1)."""

    def __init__(self, seed):
        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            parts = list(seed)
        else:
            parts = [seed]

        mash = Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for part in parts:
            self.s0 = self._fold(self.s0, mash(part))
            self.s1 = self._fold(self.s1, mash(part))
            self.s2 = self._fold(self.s2, mash(part))

    @staticmethod
    def _fold(state: float, hashed: float) -> float:
        state -= hashed
        if state < 0:
            state += 1
        return state

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        t = 2091639 * self.s0 + self.c * _TWO_POW_NEG_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2


def luck(key: str) -> float:
    """First draw of a generator seeded with ``key``."""
    return AleaPRNG(key).random()
