"""Display scale factors and the pixel adjustment function.

Scales are expressed in quarter steps: 4 is 100%, 5 is 125%, 6 is 150%, 8 is 200%.
The same px_adjust is used when writing the generated rescale procedure and when
sizing the 125%/150% icon atlas variants, so generated constants and atlas cells agree.
"""

import math
from enum import Enum


class Scale(Enum):
    ONE = (4, 'dbisOne')
    ONE_AND_QUARTER = (5, 'dbisOneAndQuarter')
    ONE_AND_HALF = (6, 'dbisOneAndHalf')
    TWO = (8, 'dbisTwo')

    def __init__(self, quarters: int, target_name: str):
        self.quarters = quarters
        self.target_name = target_name

    @property
    def percent(self) -> int:
        return self.quarters * 25


# Ordered; the first entry is the baseline that needs no adjustment
SCALES: tuple[Scale, ...] = tuple(Scale)
BASELINE = Scale.ONE


def px_adjust(value: int, scale: Scale | int) -> int:
    """Scale a signed pixel value, preserving its sign."""
    quarters = scale.quarters if isinstance(scale, Scale) else scale
    if value < 0:
        return -px_adjust(-value, quarters)
    return math.floor(value * quarters / 4.0 + 0.1)
