# =============================================================================
# Fair Random Source
# Uniform integers from a cryptographically strong 32-bit generator.
#
# A plain `sample % n` over 32-bit samples favours the low values whenever n
# does not divide 2**32 evenly. Samples from the incomplete tail are thrown
# away and redrawn instead (rejection sampling), so every value in [0, n) is
# equally likely.
# =============================================================================

import secrets

# --- CONFIGURATION ---
SOURCE_RANGE = 2 ** 32    # Number of distinct values the entropy source yields.
JITTER_STEPS = 1000       # Resolution of signed_jitter on each side of zero.


def _secure_u32():
    """Returns one uniformly random unsigned 32-bit integer."""
    return secrets.randbits(32)


class FairRandom:
    """
    Unbiased bounded integers.

    `source` is any zero-argument callable returning an unsigned 32-bit
    integer. It defaults to the OS CSPRNG; tests pass a fixed sequence.
    """

    def __init__(self, source=None):
        self.source = source or _secure_u32
        self.draws = 0  # Raw samples consumed, rejected ones included.

    def uniform_int(self, max_exclusive: int) -> int:
        """Returns an integer in [0, max_exclusive); 0 for max_exclusive <= 0."""
        if max_exclusive <= 0:
            return 0
        if max_exclusive > SOURCE_RANGE:
            raise ValueError(f"max_exclusive {max_exclusive} exceeds the 32-bit source range")

        limit = (SOURCE_RANGE // max_exclusive) * max_exclusive
        while True:
            sample = self.source()
            self.draws += 1
            if sample < limit:
                return sample % max_exclusive

    def choice(self, seq):
        """Picks one element of a non-empty sequence uniformly."""
        return seq[self.uniform_int(len(seq))]

    def signed_jitter(self, magnitude: float) -> float:
        """
        Returns a value strictly inside (-magnitude, magnitude).

        The offset is one of 2*JITTER_STEPS+1 evenly spaced points drawn with
        uniform_int, scaled so the outermost point stays short of the bound.
        """
        step = self.uniform_int(2 * JITTER_STEPS + 1) - JITTER_STEPS
        return magnitude * step / (JITTER_STEPS + 1)
