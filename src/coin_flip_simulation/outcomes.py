import random
import sys
from enum import Enum
from typing import List


class InvalidArgument(ValueError):
    """
    Raised for negative, zero or non-integer simulation arguments.
    """


class Coin(Enum):
    """
    One side of a fair coin. The value is the symbol used in outcome strings.
    """
    HEADS = "H"
    TAILS = "T"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def flip(cls, rng: random.Random) -> "Coin":
        """
        Draw one side with probability 0.5 each.
        """
        if rng.random() < 0.5:
            return cls.HEADS
        return cls.TAILS


def _check_flips(flips_per_iteration: int) -> None:
    if isinstance(flips_per_iteration, bool) or not isinstance(flips_per_iteration, int):
        raise InvalidArgument(
            f"flips_per_iteration must be an int, got {type(flips_per_iteration).__name__}"
        )
    if flips_per_iteration < 0:
        raise InvalidArgument("flips_per_iteration must be >= 0")


def num_outcomes(flips_per_iteration: int) -> int:
    """
    Number of distinct outcomes for k flips (2^k).

    Raises OverflowError when 2^k does not fit in a native index.
    """
    _check_flips(flips_per_iteration)

    n = 1 << flips_per_iteration
    if n > sys.maxsize:
        raise OverflowError(
            f"2^{flips_per_iteration} outcomes exceeds the maximum size {sys.maxsize}"
        )
    return n


def enumerate_outcomes(flips_per_iteration: int) -> List[str]:
    """
    All 2^k outcome strings in ascending order.

    Outcome i is the binary expansion of i read most significant flip first,
    with 0 -> Heads and 1 -> Tails. Since "H" < "T" this is plain
    lexicographic order:

        enumerate_outcomes(2) == ["HH", "HT", "TH", "TT"]

    k == 0 yields the single empty outcome.
    """
    n = num_outcomes(flips_per_iteration)
    symbols = (Coin.HEADS.value, Coin.TAILS.value)

    outcomes: List[str] = []
    for i in range(n):
        chars = []
        for j in range(1, flips_per_iteration + 1):
            # floor(i / 2^(k-j)) even -> Heads
            chars.append(symbols[(i >> (flips_per_iteration - j)) & 1])
        outcomes.append("".join(chars))

    return outcomes
