"""
Example three-phase datasets for the CLI, the playground and tests.
"""

import numpy as np

from .analytics import generate_sine
from .models import WaveformBatch

SAMPLING_FREQ = 1000  # Hz
NUM_SAMPLES = 100
MAINS_FREQ = 50  # Hz
VOLTAGE_RMS = 230.0  # V
CURRENT_RMS = 10.0  # A
CURRENT_LAG_DEG = 30.0

EXAMPLES = {
    "balanced": "Balanced Three-Phase System: normal balanced operation at 50Hz",
    "unbalanced": "Unbalanced System: voltage unbalance on L2 phase (-10%)",
    "harmonic": "System with Harmonics: 3rd and 5th harmonic distortion on L1 voltage",
}


def generate_three_phase(
    voltage_rms: float = VOLTAGE_RMS,
    current_rms: float = CURRENT_RMS,
    current_lag_deg: float = CURRENT_LAG_DEG,
    frequency: float = MAINS_FREQ,
    sampling_freq: float = SAMPLING_FREQ,
    num_samples: int = NUM_SAMPLES,
    voltage_harmonics: dict[int, tuple[float, float]] | None = None,
) -> WaveformBatch:
    """
    Generate a balanced positive-sequence three-phase batch.

    Args:
        voltage_rms: Phase voltage RMS (V)
        current_rms: Phase current RMS (A)
        current_lag_deg: Current lag behind voltage (degrees, positive = lagging)
        frequency: Fundamental frequency (Hz)
        sampling_freq: Sampling frequency (Hz)
        num_samples: Number of samples per channel
        voltage_harmonics: Harmonics added to every voltage phase, as in generate_sine

    Returns:
        WaveformBatch
    """
    v_amp = voltage_rms * np.sqrt(2)
    i_amp = current_rms * np.sqrt(2)
    lag = np.radians(current_lag_deg)

    channels = {}
    for phase, offset_deg in (("L1", 0.0), ("L2", -120.0), ("L3", 120.0)):
        offset = np.radians(offset_deg)
        _, channels[f"voltage_{phase}"] = generate_sine(
            v_amp, frequency, offset, sampling_freq, num_samples, voltage_harmonics
        )
        _, channels[f"current_{phase}"] = generate_sine(
            i_amp, frequency, offset - lag, sampling_freq, num_samples
        )

    return WaveformBatch(sampling_rate_hz=sampling_freq, **channels)


def create_example(name: str) -> WaveformBatch:
    """Build one of the named EXAMPLES datasets"""
    if name not in EXAMPLES:
        raise KeyError(f"Unknown example {name!r}, choose from {', '.join(EXAMPLES)}")

    base = generate_three_phase()
    if name == "balanced":
        return base

    data = base.to_dict()
    if name == "unbalanced":
        data["voltage_L2"] = [v * 0.9 for v in data["voltage_L2"]]
    else:
        _, distorted = generate_sine(
            VOLTAGE_RMS * np.sqrt(2),
            MAINS_FREQ,
            0.0,
            SAMPLING_FREQ,
            NUM_SAMPLES,
            {3: (0.10, 0.0), 5: (0.05, 0.0)},
        )
        data["voltage_L1"] = distorted.tolist()

    return WaveformBatch.from_dict(data)
