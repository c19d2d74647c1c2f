"""Value scales — map raw values into [0, 1] and back.

All scales take the dataset-global min/max so that visual encodings stay
comparable while filters change:

    linear  (v - min) / (max - min)
    sqrt    sqrt(v - min) / sqrt(max - min)
    log     log10(v - min + 1) / log10(max - min + 1)

``value_for_fraction`` is the exact inverse and is used for legend ticks.
"""

import math

from kriskogram.config import ScaleMode


def normalize(value: float, lo: float, hi: float, mode: ScaleMode = ScaleMode.LINEAR) -> float:
    span = hi - lo
    if not math.isfinite(value) or span <= 0:
        return 0.0
    shifted = min(max(value, lo), hi) - lo

    if mode == ScaleMode.SQRT:
        fraction = math.sqrt(shifted) / math.sqrt(span)
    elif mode == ScaleMode.LOG:
        fraction = math.log10(shifted + 1) / math.log10(span + 1)
    else:
        fraction = shifted / span
    return max(0.0, min(1.0, fraction))


def value_for_fraction(fraction: float, lo: float, hi: float, mode: ScaleMode = ScaleMode.LINEAR) -> float:
    span = hi - lo
    if span <= 0:
        return lo
    f = max(0.0, min(1.0, fraction))

    if mode == ScaleMode.SQRT:
        return lo + f * f * span
    if mode == ScaleMode.LOG:
        return lo + math.pow(10, f * math.log10(span + 1)) - 1
    return lo + f * span
