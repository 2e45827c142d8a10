"""Statistical assessment of one time pad randomness.

Measures entropy, chi-square distribution, arithmetic mean, a Monte Carlo
estimate of pi and the serial correlation coefficient of a byte stream,
either byte by byte or bit by bit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import BinaryIO, Union

Z_MAX = 6.0
LOG_SQRT_PI = 0.5723649429247000870717135
I_SQRT_PI = 0.5641895835477562869480795
BIGX = 20.0
MONTEN = 6
UNDEFINED_CORRELATION = -100000.0

_CHUNK = 65536

_POZ_SMALL = (
    0.000124818987, -0.001075204047, 0.005198775019, -0.019198292004,
    0.059054035642, -0.151968751364, 0.319152932694, -0.531923007300,
    0.797884560593,
)
_POZ_LARGE = (
    -0.000045255659, 0.000152529290, -0.000019538132, -0.000676904986,
    0.001390604284, -0.000794620820, -0.002034254874, 0.006549791214,
    -0.010557625006, 0.011630447319, -0.009279453341, 0.005353579108,
    -0.002141268741, 0.000535310849, 0.999936657524,
)


def _horner(coefficients: tuple[float, ...], x: float) -> float:
    acc = 0.0
    for coefficient in coefficients:
        acc = acc * x + coefficient
    return acc


def _ex(x: float) -> float:
    return 0.0 if x < -BIGX else math.exp(x)


def poz(z: float) -> float:
    """Cumulative probability of the standard normal from -inf to z.

    Six digit accuracy; saturates at |z| >= 6.
    """
    if z == 0.0:
        x = 0.0
    else:
        y = 0.5 * abs(z)
        if y >= Z_MAX * 0.5:
            x = 1.0
        elif y < 1.0:
            x = _horner(_POZ_SMALL, y * y) * y * 2.0
        else:
            x = _horner(_POZ_LARGE, y - 2.0)
    return (x + 1.0) * 0.5 if z > 0.0 else (1.0 - x) * 0.5


def pochisq(ax: float, df: int) -> float:
    """Probability of a chi-square value ``ax`` with ``df`` degrees of freedom."""
    x = ax
    if x <= 0.0 or df < 1:
        return 1.0
    a = 0.5 * x
    even = df % 2 == 0
    y = _ex(-a) if df > 1 else 1.0
    s = y if even else 2.0 * poz(-math.sqrt(x))
    if df <= 2:
        return s

    x = 0.5 * (df - 1.0)
    z = 1.0 if even else 0.5
    if a > BIGX:
        e = 0.0 if even else LOG_SQRT_PI
        c = math.log(a)
        while z <= x:
            e = math.log(z) + e
            s += _ex(c * z - a - e)
            z += 1.0
        return s

    e = 1.0 if even else I_SQRT_PI / math.sqrt(a)
    c = 0.0
    while z <= x:
        e = e * (a / z)
        c = c + e
        z += 1.0
    return c * y + s


@dataclass(frozen=True)
class PyxResult:
    """Metrics of one assessment; ``count`` is in samples (bytes or bits)."""

    count: int
    entropy: float
    chisq: float
    mean: float
    montepi: float
    scc: float

    @property
    def correlation_defined(self) -> bool:
        return self.scc >= -99999


class PyxAccumulator:
    """Incrementally gathers the statistics of a byte stream."""

    def __init__(self, binary: bool = False) -> None:
        self.binary = bool(binary)
        self._counts = [0] * 256
        self._total = 0
        self._monte: list[int] = []
        self._monte_tries = 0
        self._monte_inside = 0
        self._in_circle = (256.0 ** (MONTEN // 2) - 1) ** 2
        self._first: int | None = None
        self._last = 0.0
        self._t1 = 0.0
        self._t2 = 0.0
        self._t3 = 0.0

    def add(self, data: bytes) -> None:
        """Account for every byte of ``data``."""
        for octet in data:
            self._monte_sample(octet)
            if self.binary:
                for shift in range(8):
                    self._sample(1 if (octet << shift) & 0x80 else 0)
            else:
                self._sample(octet)

    def _sample(self, value: int) -> None:
        self._counts[value] += 1
        self._total += 1
        if self._first is None:
            self._first = value
            self._last = 0.0
        else:
            self._t1 += self._last * value
        self._t2 += value
        self._t3 += value * value
        self._last = float(value)

    def _monte_sample(self, octet: int) -> None:
        self._monte.append(octet)
        if len(self._monte) < MONTEN:
            return
        half = MONTEN // 2
        x = y = 0.0
        for high, low in zip(self._monte[:half], self._monte[half:]):
            x = x * 256.0 + high
            y = y * 256.0 + low
        self._monte.clear()
        self._monte_tries += 1
        if x * x + y * y <= self._in_circle:
            self._monte_inside += 1

    def finish(self) -> PyxResult:
        """Compute the metrics for everything added so far."""
        total = self._total
        t1 = self._t1 + self._last * (self._first or 0)
        t2 = self._t2 * self._t2
        denominator = total * self._t3 - t2
        if denominator == 0.0:
            scc = UNDEFINED_CORRELATION
        else:
            scc = (total * t1 - t2) / denominator

        counts = self._counts[: 2 if self.binary else 256]
        if total:
            expected = total / len(counts)
            chisq = sum((n - expected) ** 2 / expected for n in counts)
            mean = sum(value * n for value, n in enumerate(counts)) / total
            entropy = 0.0
            for n in counts:
                if n:
                    p = n / total
                    entropy += p * math.log2(1 / p)
        else:
            chisq = math.nan
            mean = math.nan
            entropy = 0.0

        if self._monte_tries:
            montepi = 4.0 * (self._monte_inside / self._monte_tries)
        else:
            montepi = 0.0

        return PyxResult(total, entropy, chisq, mean, montepi, scc)


def assess(data: Union[bytes, bytearray, memoryview, BinaryIO], binary: bool = False) -> PyxResult:
    """Assess a byte string or a binary stream read to its end."""
    accumulator = PyxAccumulator(binary)
    if hasattr(data, "read"):
        for chunk in iter(lambda: data.read(_CHUNK), b""):
            accumulator.add(chunk)
    else:
        accumulator.add(data)
    return accumulator.finish()