"""
Price feed and clock models.

The engine never trusts these directly: every read goes through the staleness
and validity checks in ``valuation``.
"""

import time
from typing import Protocol, Tuple


class Clock(Protocol):
    def now(self) -> int: ...


class PriceFeed(Protocol):
    """Surface of an aggregator-style oracle as consumed by the engine."""

    decimals: int

    def latest_round_data(self) -> Tuple[int, int, int, int, int]: ...


class SystemClock:
    """Wall clock in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class SimulationClock:
    """Manually advanced clock for tests and simulations."""

    def __init__(self, start: int = 1_700_000_000):
        self.current_time = start

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int) -> int:
        """Moves the clock forward and returns the new time."""
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        self.current_time += seconds
        return self.current_time


class MockPriceFeed:
    """
    Simple aggregator implementation for simulations.

    Prices are integers scaled by ``10**decimals`` (e.g. $2000 with 8 decimals
    is ``2000 * 10**8``). Each update opens a new round stamped with the clock.
    """

    def __init__(self, decimals: int, initial_answer: int, clock=None):
        self.decimals = decimals
        self.clock = clock or SystemClock()
        self.latest_answer = 0
        self.latest_timestamp = 0
        self.latest_round = 0
        self.started_at = 0
        self.update_answer(initial_answer)

    def update_answer(self, answer: int) -> None:
        """Publishes a new price in a fresh round."""
        self.latest_round += 1
        self.latest_answer = answer
        self.latest_timestamp = self.clock.now()
        self.started_at = self.latest_timestamp
        self.answered_in_round = self.latest_round

    def update_round_data(self, round_id: int, answer: int, updated_at: int, started_at: int) -> None:
        """Overwrites the round fields verbatim, including stale or odd values."""
        self.latest_round = round_id
        self.latest_answer = answer
        self.latest_timestamp = updated_at
        self.started_at = started_at
        self.answered_in_round = round_id

    def latest_round_data(self) -> Tuple[int, int, int, int, int]:
        """Returns ``(round_id, answer, started_at, updated_at, answered_in_round)``."""
        return (
            self.latest_round,
            self.latest_answer,
            self.started_at,
            self.latest_timestamp,
            self.answered_in_round,
        )

    def fetch_price(self) -> int:
        """Returns the current raw answer."""
        return self.latest_answer
