"""Waveform batch container"""

from dataclasses import dataclass

import numpy as np

from .validation import CHANNELS, validate_payload


class InvalidBatchError(ValueError):
    """Raised when a payload violates the waveform batch invariant"""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid batch: " + "; ".join(self.errors))


def _frozen_channel(samples) -> np.ndarray:
    array = np.array(samples, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class WaveformBatch:
    """Six synchronized channels (three voltages, three currents) plus sampling rate.

    All channels have the same length (>= 2) and the sampling rate is positive.
    Channel arrays are read-only.
    """

    voltage_L1: np.ndarray
    voltage_L2: np.ndarray
    voltage_L3: np.ndarray
    current_L1: np.ndarray
    current_L2: np.ndarray
    current_L3: np.ndarray
    sampling_rate_hz: float

    def __post_init__(self):
        for channel in CHANNELS:
            object.__setattr__(self, channel, _frozen_channel(getattr(self, channel)))
        object.__setattr__(self, "sampling_rate_hz", float(self.sampling_rate_hz))

        errors = validate_payload(self.to_dict())
        if errors:
            raise InvalidBatchError(errors)

    @classmethod
    def from_dict(cls, payload) -> "WaveformBatch":
        """Build a batch from a JSON-shaped payload, raising InvalidBatchError"""
        errors = validate_payload(payload)
        if errors:
            raise InvalidBatchError(errors)
        return cls(**{field: payload[field] for field in CHANNELS + ("sampling_rate_hz",)})

    def to_dict(self) -> dict:
        data = {channel: getattr(self, channel).tolist() for channel in CHANNELS}
        data["sampling_rate_hz"] = self.sampling_rate_hz
        return data

    @property
    def num_samples(self) -> int:
        return len(self.voltage_L1)

    @property
    def voltages(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.voltage_L1, self.voltage_L2, self.voltage_L3

    @property
    def currents(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.current_L1, self.current_L2, self.current_L3

    @property
    def time(self) -> np.ndarray:
        """Sample timestamps in seconds"""
        return np.arange(self.num_samples) / self.sampling_rate_hz
