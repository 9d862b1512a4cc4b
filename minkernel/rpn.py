"""A tiny reverse-Polish calculator over command-line tokens."""

from __future__ import annotations

import sys
from typing import Iterable, Optional, Sequence

STACK_CAPACITY = 100


def _wrap(value: int, bits: int) -> int:
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


def _atol(token: str) -> int:
    """Read a token positionally as decimal digits, without validation."""
    value = 0
    for ch in token:
        value = _wrap(value * 10 + (ord(ch) - ord("0")), 64)
    return value


def evaluate(args: Iterable[str]) -> int:
    """Evaluate RPN tokens supporting ``+`` and ``-``; return the top of the stack.

    The stack starts with a single 0 at its bottom, and the result is
    truncated to a signed 32-bit integer.
    """
    stack = [0]

    def pop() -> int:
        if not stack:
            raise ValueError("stack underflow")
        return stack.pop()

    def push(value: int) -> None:
        if len(stack) >= STACK_CAPACITY:
            raise ValueError("stack overflow")
        stack.append(_wrap(value, 64))

    for token in args:
        if token == "+":
            b = pop()
            a = pop()
            push(a + b)
        elif token == "-":
            b = pop()
            a = pop()
            push(a - b)
        else:
            push(_atol(token))

    if not stack:
        return 0
    return _wrap(stack[-1], 32)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Evaluate the given tokens (default: the command line) and return the result."""
    if argv is None:
        argv = sys.argv[1:]
    return evaluate(argv)


if __name__ == "__main__":
    sys.exit(main())