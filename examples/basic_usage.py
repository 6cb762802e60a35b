"""examples/basic_usage.py - Runtime taps.

Demonstrates:
    log_tap           - log a value inline, with the call-site appended
    labels / options  - string labels and TapOptions
    console.<level>   - plain logging plus a tap per level
"""

import logging

from logtap import TapOptions, console, log_tap, make_tap

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s %(filename)s:%(lineno)d: %(message)s",
)


def parse(rows):
    return [int(r) if r.isdigit() else 0 for r in rows]


if __name__ == "__main__":
    rows = ["1", "2", "zero", "3", "4", "5"]

    # value + "- basic_usage.py:<line>"
    best = max(n for n in log_tap(parse(rows)) if n % 2)

    # a string label turns the location off
    best = max(n for n in log_tap(parse(rows), "parsed") if n % 2)

    # both label and location
    best = log_tap(best, TapOptions(label="best odd"))

    # a tap bound to another level / logger
    audit_tap = make_tap("warning", logging.getLogger("audit"))
    audit_tap(best, "audited")

    console.info("plain call, %d rows", len(rows))
    console.debug.tap(rows, "raw rows")
