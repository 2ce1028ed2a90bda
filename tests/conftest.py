import numpy as np
import pytest

from wordstorage import INLINE_WORDS


@pytest.fixture
def rng():
    return np.random.default_rng(20250319)


@pytest.fixture
def random_int(rng):
    """Signed random integers spanning up to ``max_limbs`` 32-bit limbs."""

    def draw(max_limbs: int = INLINE_WORDS + 3, signed: bool = True, min_limbs: int = 1) -> int:
        limbs = int(rng.integers(min_limbs, max_limbs + 1))
        value = int.from_bytes(rng.bytes(4 * limbs), "little")
        # force the top limb non-zero so the limb count is exact
        value |= 1 << (32 * limbs - 1 - int(rng.integers(0, 32)))
        if signed and rng.integers(2):
            value = -value
        return value

    return draw
