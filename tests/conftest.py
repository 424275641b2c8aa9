import math

import pytest

from power_analytics import build_baseline, create_example, generate_three_phase


def iter_leaves(data, path=()):
    """Yield (path, value) for every non-mapping value of a nested dict."""
    for key, value in data.items():
        if isinstance(value, dict):
            yield from iter_leaves(value, path + (key,))
        else:
            yield path + (key,), value


@pytest.fixture
def balanced_batch():
    return create_example("balanced")


@pytest.fixture
def baseline(balanced_batch):
    return build_baseline(balanced_batch)


@pytest.fixture
def fine_batch():
    """50 Hz, 10 kHz sampling, 10 cycles, current lagging 30 degrees"""
    return generate_three_phase(
        voltage_rms=230.0,
        current_rms=10.0,
        current_lag_deg=30.0,
        frequency=50.0,
        sampling_freq=10000,
        num_samples=2000,
    )


def one_step_deg(baseline):
    """Phase resolution of one lag sample, in degrees"""
    return 360.0 / baseline["diagnostics"]["samples_per_period"]


def is_number(value):
    return isinstance(value, float) and math.isfinite(value)
