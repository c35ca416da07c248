"""Band-limited impulse table generation."""

from __future__ import annotations

import argparse
import math
import sys

IMPULSE_HEIGHT = 256.0

IMPULSE_N_SHIFT = 7
IMPULSE_W_SHIFT = 5
IMPULSE_CUTOFF = 1.0

_MAX_CORRECTIONS = 20


def _sinc(x: float) -> float:
    a = math.pi * x
    if a == 0.0:
        sys.stderr.write("sinc(0), should not happen\n")
        return 1.0
    return math.sin(a) / a


def _blackman(n: float, m: float) -> float:
    return 0.42 - 0.5 * math.cos(2 * n * math.pi / m) + 0.08 * math.cos(4 * n * math.pi / m)


def _taps(j: float, dcorr: float, cutoff: float, width: int) -> list[int]:
    half = width // 2
    return [
        round(
            dcorr
            * IMPULSE_HEIGHT
            * _sinc((i - j) * cutoff)
            * _blackman(i - j + half, width)
        )
        for i in range(-half + 1, half + 1)
    ]


def _shifted_impulse(j: float, cutoff: float, width: int) -> list[int]:
    div = IMPULSE_HEIGHT
    dcorr = cutoff
    attempts = 0
    while True:
        corr = int(IMPULSE_HEIGHT - sum(_taps(j, dcorr, cutoff, width)))
        dcorr *= 1.0 + corr / div
        div *= 1.3
        if corr == 0:
            break
        previous = attempts
        attempts += 1
        if previous >= _MAX_CORRECTIONS:
            break
    row = _taps(j, dcorr, cutoff, width)
    row[width // 2] += int(IMPULSE_HEIGHT) - sum(row)
    return row


def gen_impulsetab(w_shift: int, n_shift: int, cutoff: float) -> list[int]:
    """Return 2**n_shift impulses of 2**w_shift samples, shifted by 1/2**n_shift each.

    Every impulse sums to IMPULSE_HEIGHT.
    """
    width = 1 << w_shift
    count = 1 << n_shift
    table = [0] * (width * count)
    table[width // 2 - 1] = int(IMPULSE_HEIGHT)
    for shift in range(1, count):
        start = shift * width
        table[start : start + width] = _shifted_impulse(shift / count, cutoff, width)
    return table


def render_header(table: list[int], w_shift: int, n_shift: int) -> str:
    """Render an impulse table as a C header defining ``base_impulse``."""
    mask = (1 << w_shift) - 1
    parts = [
        f"#define IMPULSE_N_SHIFT {n_shift}\n",
        f"#define IMPULSE_W_SHIFT {w_shift}\n",
        "static const short base_impulse[] = {",
    ]
    for index, value in enumerate(table):
        if index & mask == 0:
            parts.append("\n\t")
        parts.append(f"{value:6d},")
    parts.append("\n};\n")
    return "".join(parts)


def main(argv: list[str] | None = None) -> int:
    """Write the default impulse table header to standard output."""
    parser = argparse.ArgumentParser(
        prog="gen-impulse-h",
        description="Print the band-limited impulse table as a C header.",
    )
    parser.parse_args(argv)
    table = gen_impulsetab(IMPULSE_W_SHIFT, IMPULSE_N_SHIFT, IMPULSE_CUTOFF)
    sys.stdout.write(render_header(table, IMPULSE_W_SHIFT, IMPULSE_N_SHIFT))
    return 0