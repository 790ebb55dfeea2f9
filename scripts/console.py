"""
scripts/console.py — Coloured, symbol-prefixed console lines for the smoke test.
"""

from __future__ import annotations

COLORS = {
    "green": "\x1b[32m",
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "reset": "\x1b[0m",
}

PASS_SYMBOL = "✓"
FAIL_SYMBOL = "✗"


def log(color: str, symbol: str, message: str) -> None:
    print(f"{COLORS[color]}{symbol}{COLORS['reset']} {message}", flush=True)


def log_result(passed: bool, message: str) -> None:
    if passed:
        log("green", PASS_SYMBOL, message)
    else:
        log("red", FAIL_SYMBOL, message)
