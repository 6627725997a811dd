"""Interval strategies: delay in seconds before the pass after ``run``.

Any callable taking the finished pass number (starting at 1) and returning
a non-negative number of seconds can be used as ``interval_strategy``.
"""

from __future__ import annotations

from typing import Callable

IntervalStrategy = Callable[[int], float]


def no_delay(run: int) -> float:
    """Default: start the next pass right away."""
    return 0.0


def constant(delay: float) -> IntervalStrategy:
    """Wait the same ``delay`` between every pass."""
    if delay < 0:
        raise ValueError(f"delay must be >= 0, got {delay}")

    def strategy(run: int) -> float:
        return delay

    return strategy


def linear(step: float, start: float = 0.0) -> IntervalStrategy:
    """
    Grow the delay by ``step`` after each pass.

    Example:
        linear(0.01)  # 10ms after pass 1, 20ms after pass 2, ...
    """
    if step < 0 or start < 0:
        raise ValueError("step and start must be >= 0")

    def strategy(run: int) -> float:
        return start + step * run

    return strategy


def exponential(
    base: float,
    factor: float = 2.0,
    maximum: float | None = None,
) -> IntervalStrategy:
    """
    Exponential backoff: ``base * factor ** (run - 1)``, capped at ``maximum``.

    Example:
        exponential(0.5, maximum=30)  # 0.5s, 1s, 2s, 4s, ... up to 30s
    """
    if base < 0:
        raise ValueError(f"base must be >= 0, got {base}")
    if factor < 1:
        raise ValueError(f"factor must be >= 1, got {factor}")
    if maximum is not None and maximum < 0:
        raise ValueError(f"maximum must be >= 0, got {maximum}")

    def strategy(run: int) -> float:
        delay = base * factor ** max(run - 1, 0)
        if maximum is not None:
            return min(delay, maximum)
        return delay

    return strategy
