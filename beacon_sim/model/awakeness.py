"""Observer duty-cycle strategies (awake/asleep state machines)."""

from enum import Enum
from typing import Optional

import numpy as np

from ..errors import InvalidConfigurationError


class AwakenessStrategyType(Enum):
    """Closed set of awakeness strategies."""
    FIXED = "fixed"
    RANDOM = "random"

    @property
    def is_for_test(self) -> bool:
        return False


class AwakenessStrategy:
    """
    Per-observer timer state machine.

    Time is split into cycles of `cycle` rounds. In every cycle the observer
    is awake for `duration` consecutive rounds starting at its awakening time
    and asleep otherwise. Subclasses choose where in the cycle the next
    awakening falls.

    `update_awakeness_state` must be called once per round, with rounds
    strictly increasing and none skipped. At most one transition fires per
    call.
    """

    strategy_type: AwakenessStrategyType

    def __init__(self, cycle: int, duration: int, first_awakening_time: int):
        if cycle <= 0 or duration <= 0:
            raise InvalidConfigurationError(
                "Both awakeness cycle and duration must be positive.")
        if duration > cycle:
            raise InvalidConfigurationError(
                "Awakeness cycle must be greater or equal to duration.")
        if first_awakening_time < 0:
            raise InvalidConfigurationError(
                "First awakening time must not be negative.")
        self.cycle = cycle
        self.duration = duration
        self.next_awakening_time = first_awakening_time
        self.next_cycle_start = 0
        self.awake = first_awakening_time == 0

    def is_awake(self) -> bool:
        return self.awake

    def update_awakeness_state(self, current_round: int) -> None:
        """Wake or sleep the observer according to its schedule."""
        if self.awake:
            if current_round >= self.next_awakening_time + self.duration:
                self.next_cycle_start += self.cycle
                self.next_awakening_time = self._schedule_next_awakening()
                # No gap before the next window (e.g. cycle == duration): stay awake
                self.awake = self.next_awakening_time <= current_round
        elif current_round >= self.next_awakening_time:
            self.awake = True

    def _schedule_next_awakening(self) -> int:
        raise NotImplementedError

    def __repr__(self) -> str:
        state = "awake" if self.awake else "asleep"
        return (f"{type(self).__name__}(cycle={self.cycle}, duration={self.duration}, "
                f"next={self.next_awakening_time}, {state})")


class FixedAwakenessStrategy(AwakenessStrategy):
    """Observer wakes at the same offset from the start of every cycle."""

    strategy_type = AwakenessStrategyType.FIXED

    def __init__(self, cycle: int, duration: int, first_awakening_time: int):
        super().__init__(cycle, duration, first_awakening_time)
        self.offset = first_awakening_time

    def _schedule_next_awakening(self) -> int:
        return self.next_cycle_start + self.offset


class RandomAwakenessStrategy(AwakenessStrategy):
    """Observer wakes at a uniformly random offset within each new cycle."""

    strategy_type = AwakenessStrategyType.RANDOM

    def __init__(self, cycle: int, duration: int, first_awakening_time: int,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(cycle, duration, first_awakening_time)
        self.rng = rng if rng is not None else np.random.default_rng()

    def _schedule_next_awakening(self) -> int:
        offset = int(self.rng.integers(0, self.cycle - self.duration + 1))
        return self.next_cycle_start + offset


def create_awakeness_strategy(
    strategy_type: AwakenessStrategyType,
    cycle: int,
    duration: int,
    rng: Optional[np.random.Generator] = None
) -> AwakenessStrategy:
    """
    Build an awakeness strategy whose first awakening is drawn uniformly
    from [0, cycle - duration].
    """
    if duration > cycle:
        raise InvalidConfigurationError(
            "Awakeness cycle must be greater or equal to duration.")
    rng = rng if rng is not None else np.random.default_rng()
    first_awakening_time = int(rng.integers(0, cycle - duration + 1))

    if strategy_type is AwakenessStrategyType.FIXED:
        return FixedAwakenessStrategy(cycle, duration, first_awakening_time)
    if strategy_type is AwakenessStrategyType.RANDOM:
        return RandomAwakenessStrategy(cycle, duration, first_awakening_time, rng)
    raise ValueError(f"Unknown awakeness strategy type: {strategy_type!r}")
