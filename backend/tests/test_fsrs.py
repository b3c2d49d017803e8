"""Unit tests for the memory model configuration."""

from datetime import timedelta

import pytest
from fsrs import Scheduler

from tango.srs.errors import InvalidConfigurationError
from tango.srs.fsrs import (
    DEFAULT_DIFFICULTY,
    DEFAULT_PARAMETERS,
    MAX_DIFFICULTY,
    SchedulerParameters,
    difficulty_from_ease,
)


def test_default_scheduler_is_configured_from_parameters():
    scheduler = DEFAULT_PARAMETERS.scheduler

    assert isinstance(scheduler, Scheduler)
    assert scheduler.desired_retention == 0.9
    assert scheduler.maximum_interval == 36500
    assert tuple(scheduler.learning_steps) == (timedelta(minutes=1), timedelta(minutes=10))
    assert tuple(scheduler.relearning_steps) == (timedelta(minutes=10),)
    assert scheduler.enable_fuzzing is False


def test_scheduler_is_built_once():
    assert DEFAULT_PARAMETERS.scheduler is DEFAULT_PARAMETERS.scheduler


def test_custom_parameters_reach_the_scheduler():
    params = SchedulerParameters(request_retention=0.85, maximum_interval=180, learning_steps=(5.0,))

    scheduler = params.scheduler

    assert scheduler.desired_retention == 0.85
    assert scheduler.maximum_interval == 180
    assert tuple(scheduler.learning_steps) == (timedelta(minutes=5),)


def test_custom_weights_reach_the_scheduler():
    weights = tuple(Scheduler().parameters)
    params = SchedulerParameters(weights=weights)

    assert tuple(params.scheduler.parameters) == pytest.approx(weights)


def test_parameters_compare_by_value():
    assert SchedulerParameters() == DEFAULT_PARAMETERS
    assert SchedulerParameters(maximum_interval=10) != DEFAULT_PARAMETERS


def test_difficulty_from_ease_maps_sm2_range():
    assert difficulty_from_ease(2.5) == pytest.approx(DEFAULT_DIFFICULTY)
    assert difficulty_from_ease(1.3) == pytest.approx(MAX_DIFFICULTY)
    assert difficulty_from_ease(1.0) == pytest.approx(MAX_DIFFICULTY)
    assert difficulty_from_ease(2.0) > difficulty_from_ease(2.5)
    assert difficulty_from_ease(3.5) >= 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"learning_steps": ()},
        {"relearning_steps": ()},
        {"learning_steps": (10.0, 1.0)},
        {"learning_steps": (1.0, 1440.0)},
        {"learning_steps": (0.0,)},
        {"request_retention": 1.0},
        {"request_retention": 0.0},
        {"maximum_interval": 0},
        {"weights": (1.0, 2.0)},
    ],
)
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(InvalidConfigurationError):
        SchedulerParameters(**kwargs)
