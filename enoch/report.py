"""Verdicts and printable reports for pad randomness assessments."""

from __future__ import annotations

from dataclasses import dataclass

from .randomness import PyxResult, pochisq

PI = 3.14159265358979323846
_MARKS = {True: "PASS", False: "FAIL"}


def _compression(result: PyxResult, binary: bool) -> int:
    ideal = 1 if binary else 8
    return int(100 * (ideal - result.entropy) / float(ideal))


def _monte_carlo_error(result: PyxResult) -> float:
    return 100.0 * (abs(PI - result.montepi) / PI)


def _mark(ok: bool) -> str:
    return _MARKS[bool(ok)]


@dataclass(frozen=True)
class Verdict:
    """Pass or fail for each test of a pad assessment."""

    entropy_ok: bool
    compression_ok: bool
    distribution_ok: bool
    mean_ok: bool
    monte_carlo_ok: bool
    correlation_ok: bool
    chi_probability: float

    @property
    def density_ok(self) -> bool:
        return self.entropy_ok and self.compression_ok

    @property
    def overall(self) -> bool:
        return (
            self.density_ok
            and self.distribution_ok
            and self.mean_ok
            and self.monte_carlo_ok
            and self.correlation_ok
        )


def judge(result: PyxResult, binary: bool = False) -> Verdict:
    """Apply the pass thresholds to an assessment."""
    chip = pochisq(result.chisq, 1 if binary else 255)
    mean = result.mean
    mean_bad = (binary and 4.5 <= mean <= 5.5) or (not binary and mean <= 127 and mean >= 128)
    error = _monte_carlo_error(result)
    return Verdict(
        entropy_ok=result.entropy > 7.5,
        compression_ok=_compression(result, binary) <= 1,
        distribution_ok=not (chip * 100 <= 10 or chip * 100 >= 90),
        mean_ok=not mean_bad,
        monte_carlo_ok=not (error > 0.3 and error > 0.01),
        correlation_ok=result.scc < 0.1,
        chi_probability=chip,
    )


def terse_report(result: PyxResult, binary: bool = False) -> str:
    """Two-line comma separated report."""
    samp = "bit" if binary else "byte"
    header = f"0,File-{samp}s,Entropy,Chi-square,Mean,Monte-Carlo-Pi,Serial-Correlation\n"
    row = "1,%d,%f,%f,%f,%f,%f\n" % (
        result.count,
        result.entropy,
        result.chisq,
        result.mean,
        result.montepi,
        result.scc,
    )
    return header + row


def detailed_report(result: PyxResult, binary: bool = False) -> str:
    """Human readable report with verdicts."""
    verdict = judge(result, binary)
    samp = "bit" if binary else "byte"
    chip = verdict.chi_probability

    if chip < 0.0001:
        chance = "Value would be exceeded randomly less than 0.01 percent of the times."
    elif chip > 0.9999:
        chance = "Value would be exceeded randomly more than than 99.99 percent of the times."
    else:
        chance = "Value would be exceeded randomly %1.2f percent of the times." % (chip * 100)

    if result.correlation_defined:
        correlation = "%1.6f" % result.scc
    else:
        correlation = "undefined (all values are equal)"

    lines = [
        "Pyx Trial Assessment",
        "OVERALL\t\t: %s && %s && %s && %s && %s = %s"
        % (
            _mark(verdict.density_ok),
            _mark(verdict.distribution_ok),
            _mark(verdict.mean_ok),
            _mark(verdict.monte_carlo_ok),
            _mark(verdict.correlation_ok),
            _mark(verdict.overall),
        ),
        "",
        "One Time Pad Density",
        "Entropy : %f bits per %s." % (result.entropy, samp),
        "Optimum compression of OTP file size %d %ss by %d percent"
        % (result.count, samp, _compression(result, binary)),
        "\t[GOOD \t\t= Entropy close to 8 bits, compression 0 percent]",
        "",
        "One Time Pad Distribution",
        "Chi Square : for %d samples is %1.2f" % (result.count, result.chisq),
        chance,
        "\t[GOOD \t\t= 10 percent to 90 percent]",
        "\t[SUSPECT \t= 5 to 10 percent or 90 to 95 percent]",
        "\t[WORSE\t\t= 1 to 5 percent or 95 to 99 percent]",
        "\t[WORST\t\t= 0 to 1 percent or 99 to 100 percent]",
        "Arithmetic mean of data %ss is %1.4f" % (samp, result.mean),
        "\t[RANDOM \t= %.1f]" % (0.5 if binary else 127.5),
        "Monte Carlo value for Pi is %1.9f (error %1.2f percent)"
        % (result.montepi, _monte_carlo_error(result)),
        "\t[RANDOM\t\t= error 0.06 percent]",
        "Serial correlation coefficient is " + correlation,
        "\t[RANDOM\t\t= 0.0]",
        "\t[PREDICTED\t= 1.0]",
    ]
    return "\n".join(lines) + "\n"