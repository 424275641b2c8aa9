"""Statistics primitives for waveform sample processing"""

import numpy as np


def mean(samples) -> float:
    """Arithmetic mean. Raises ValueError on an empty sequence."""
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        raise ValueError("mean of an empty sequence")
    return float(np.mean(x))


def rms(samples) -> float:
    """Root-mean-square value"""
    x = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(mean(x**2)))


def peak_abs(samples) -> float:
    """Largest absolute sample value"""
    x = np.asarray(samples, dtype=np.float64)
    if x.size == 0:
        raise ValueError("peak of an empty sequence")
    return float(np.max(np.abs(x)))


def demean(samples) -> np.ndarray:
    """Remove the DC offset from a sample sequence"""
    x = np.asarray(samples, dtype=np.float64)
    return x - mean(x)


def calculate_stats(samples):
    """Calculate basic statistics for a sample array"""
    x = np.asarray(samples, dtype=np.float64)
    mean_val = mean(x)
    variance = mean((x - mean_val) ** 2)

    return {
        "mean": mean_val,
        "min": float(np.min(x)),
        "max": float(np.max(x)),
        "std": variance**0.5,
    }
