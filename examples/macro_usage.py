"""examples/macro_usage.py - Build-time tap expansion.

This module only works after expansion. Run it with::

    python -m logtap run examples/macro_usage.py

or look at what it expands to::

    python -m logtap expand examples/macro_usage.py
"""

from logtap.macro import tap


def parse(rows):
    return [int(r) if r.isdigit() else 0 for r in rows]


def best_odd(rows):
    odds = [n for n in parse(rows) if n % 2]
    return max(tap(odds, "odd values"))


if __name__ == "__main__":
    best = tap(best_odd(["1", "2", "zero", "3", "4", "5"]), "best")
    # Tracebacks keep the original line numbers.
    ratio = tap(best / len([]), "ratio")
