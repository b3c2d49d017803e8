"""Memory model configuration.

Stability, difficulty and interval arithmetic come from the fsrs library. This
module pins the constants a deployment tunes (target retention, learning steps,
interval cap, optional custom weights) and builds the matching fsrs.Scheduler.
Fuzzing is always off so the same review yields the same due date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import cached_property

from fsrs import Scheduler

from .errors import InvalidConfigurationError


MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0

# Difficulty given to a card with no rating history of its own
DEFAULT_DIFFICULTY = 5.0

MINUTES_PER_DAY = 24 * 60

WEIGHT_COUNT = len(Scheduler().parameters)


@dataclass(frozen=True)
class SchedulerParameters:
    """Tunable constants of the scheduler.

    Steps are expressed in minutes and must all be shorter than one day, so a
    card in a learning step is always due sooner than any graduated interval.
    Leave `weights` unset to use the library's trained defaults.
    """

    weights: tuple[float, ...] | None = None
    request_retention: float = 0.9
    maximum_interval: int = 36500
    learning_steps: tuple[float, ...] = (1.0, 10.0)
    relearning_steps: tuple[float, ...] = (10.0,)

    def __post_init__(self) -> None:
        if self.weights is not None and len(self.weights) != WEIGHT_COUNT:
            raise InvalidConfigurationError(
                f"weights must have {WEIGHT_COUNT} entries, got {len(self.weights)}"
            )
        if not 0 < self.request_retention < 1:
            raise InvalidConfigurationError(
                f"request_retention must be in (0, 1), got {self.request_retention}"
            )
        if self.maximum_interval < 1:
            raise InvalidConfigurationError("maximum_interval must be >= 1")
        _validate_steps("learning_steps", self.learning_steps)
        _validate_steps("relearning_steps", self.relearning_steps)

    @cached_property
    def scheduler(self) -> Scheduler:
        """The fsrs.Scheduler configured with these constants."""
        options = {
            "desired_retention": self.request_retention,
            "learning_steps": tuple(timedelta(minutes=m) for m in self.learning_steps),
            "relearning_steps": tuple(timedelta(minutes=m) for m in self.relearning_steps),
            "maximum_interval": self.maximum_interval,
            "enable_fuzzing": False,
        }
        if self.weights is not None:
            options["parameters"] = self.weights
        return Scheduler(**options)


def _validate_steps(name: str, steps: tuple[float, ...]) -> None:
    if not steps:
        raise InvalidConfigurationError(f"{name} must contain at least one step")
    if any(step <= 0 or step >= MINUTES_PER_DAY for step in steps):
        raise InvalidConfigurationError(f"{name} must be between 0 and 1440 minutes")
    if any(later < earlier for earlier, later in zip(steps, steps[1:])):
        raise InvalidConfigurationError(f"{name} must be non-decreasing")


DEFAULT_PARAMETERS = SchedulerParameters()


def difficulty_from_ease(ease_factor: float) -> float:
    """Translate a legacy SM-2 ease factor (1.3 .. ~2.5+) onto the difficulty scale.

    EF 2.5 (the SM-2 default) lands on the default difficulty; EF 1.3 (the SM-2
    floor) lands on the maximum difficulty.
    """
    ef = max(1.3, ease_factor)
    slope = (MAX_DIFFICULTY - DEFAULT_DIFFICULTY) / (2.5 - 1.3)
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, DEFAULT_DIFFICULTY + (2.5 - ef) * slope))
