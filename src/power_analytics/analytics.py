"""
Power analysis calculation functions for three-phase waveform batches.
Frequency, phase angle, power, unbalance and harmonic distortion estimators.
"""

import logging
import math

import numpy as np

from config import ANALYSIS_CONFIG
from utils import mean, rms

logger = logging.getLogger(__name__)

FALLBACK_FREQ = ANALYSIS_CONFIG["fallback_frequency_hz"]
HARMONIC_ORDERS = tuple(ANALYSIS_CONFIG["harmonic_orders"])
THD_EPSILON = ANALYSIS_CONFIG["thd_epsilon"]


# =============================================================================
# SIGNAL GENERATION
# =============================================================================


def generate_sine(
    amplitude: float,
    frequency: float,
    phase: float,
    sampling_freq: float,
    num_samples: int,
    harmonics: dict[int, tuple[float, float]] | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Generate a sinusoidal waveform with optional harmonics.

    Args:
        amplitude: Peak amplitude of fundamental frequency
        frequency: Fundamental frequency (Hz)
        phase: Phase offset (radians)
        sampling_freq: Sampling frequency (Hz)
        num_samples: Number of samples to generate
        harmonics: Dictionary of harmonics {harmonic_number: (amplitude_percentage, phase)}
                   e.g., {3: (0.2, 0.5), 5: (0.1, -0.3)} adds:
                   - 20% 3rd harmonic with 0.5 rad phase
                   - 10% 5th harmonic with -0.3 rad phase

    Returns:
        Tuple of (time_array, signal_array)
    """
    t = np.arange(num_samples) / sampling_freq
    signal = amplitude * np.sin(2 * np.pi * frequency * t + phase)

    if harmonics:
        for harmonic_num, (harmonic_amplitude, harmonic_phase) in harmonics.items():
            signal += (
                amplitude
                * harmonic_amplitude
                * np.sin(2 * np.pi * frequency * harmonic_num * t + harmonic_phase)
            )

    return t, signal


# =============================================================================
# FREQUENCY AND PHASE
# =============================================================================


def find_zero_crossings(signal: np.ndarray) -> np.ndarray:
    """Indices i where signal[i - 1] <= 0 and signal[i] > 0 (positive-going)."""
    x = np.asarray(signal, dtype=np.float64)
    return np.nonzero((x[:-1] <= 0) & (x[1:] > 0))[0] + 1


def estimate_frequency(signal: np.ndarray, sampling_freq: float) -> float:
    """
    Estimate the fundamental frequency by positive-going zero-crossing detection.

    No interpolation is done between samples, so the period resolution is one
    sample. The signal is expected to be demeaned.

    Args:
        signal: Demeaned time-domain samples
        sampling_freq: Sampling frequency (Hz)

    Returns:
        Frequency in Hz, or NaN when fewer than 2 crossings are found
    """
    crossings = find_zero_crossings(signal)
    if len(crossings) < 2:
        return math.nan

    avg_period = float(np.mean(np.diff(crossings)))
    return sampling_freq / avg_period


def normalize_angle(degrees: float) -> float:
    """Wrap an angle into the (-180, 180] degree range."""
    wrapped = ((degrees + 180.0) % 360.0 + 360.0) % 360.0 - 180.0
    # -180 maps onto +180 to keep the interval half-open at the bottom
    return 180.0 if wrapped == -180.0 else wrapped


def cross_correlation_lag(a: np.ndarray, b: np.ndarray, max_lag: int) -> tuple[int, float]:
    """
    Find the lag maximizing the normalized cross-correlation of a[i] with b[i + lag].

    Lags are scanned by increasing magnitude (negative before positive) and only
    a strictly larger coefficient replaces the current best, so ties resolve to
    the smallest |lag|.

    Returns:
        Tuple of (best_lag, coefficient)
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    n = min(len(a), len(b))
    max_lag = max(0, min(int(max_lag), n - 1))

    energy = math.sqrt(float(np.dot(a[:n], a[:n])) * float(np.dot(b[:n], b[:n])))
    if energy == 0.0:
        return 0, 0.0

    best_lag = 0
    best_coeff = -math.inf
    for magnitude in range(max_lag + 1):
        for lag in ((0,) if magnitude == 0 else (-magnitude, magnitude)):
            if lag >= 0:
                dot = float(np.dot(a[: n - lag], b[lag:n]))
            else:
                dot = float(np.dot(a[-lag:n], b[: n + lag]))
            coeff = dot / energy
            if coeff > best_coeff:
                best_lag, best_coeff = lag, coeff

    return best_lag, best_coeff


def estimate_phase_angle(
    a: np.ndarray,
    b: np.ndarray,
    samples_per_period: float,
    max_lag: int,
) -> float:
    """
    Estimate the phase of signal a relative to signal b in degrees.

    A negative result means a lags b. Both signals are expected to be demeaned.

    Args:
        a: Signal whose phase is measured
        b: Reference signal
        samples_per_period: Samples in one fundamental period (fs / f0)
        max_lag: Lag search window in samples (normally one period)

    Returns:
        Angle in degrees within (-180, 180]
    """
    lag, _ = cross_correlation_lag(a, b, max_lag)
    if samples_per_period <= 0:
        return 0.0
    return normalize_angle(lag / samples_per_period * 360.0)


# =============================================================================
# POWER AND BALANCE
# =============================================================================


def calculate_phase_power(v_t: np.ndarray, i_t: np.ndarray) -> dict:
    """
    Calculate single-phase power metrics.

    Args:
        v_t: Voltage time-domain samples (V)
        i_t: Current time-domain samples (A)

    Returns:
        Dictionary with P (kW), S (kVA), Q (kVAR) and PF. Q and PF are None
        when the apparent power is zero.
    """
    v_t = np.asarray(v_t, dtype=np.float64)
    i_t = np.asarray(i_t, dtype=np.float64)

    p = mean(v_t * i_t) / 1000
    s = rms(v_t) * rms(i_t) / 1000

    if s > 0:
        pf = min(1.0, max(-1.0, p / s))
        q = math.sqrt(max(0.0, s**2 - p**2))
    else:
        pf = None
        q = None

    return {"P": p, "Q": q, "S": s, "PF": pf}


def calculate_unbalance(a: float, b: float, c: float) -> float:
    """Maximum deviation from the three-phase average, in percent of the average."""
    avg = (a + b + c) / 3
    if avg == 0:
        return 0.0
    return 100 * max(abs(a - avg), abs(b - avg), abs(c - avg)) / avg


def calculate_three_phase_power(
    v1_t: np.ndarray,
    v2_t: np.ndarray,
    v3_t: np.ndarray,
    i1_t: np.ndarray,
    i2_t: np.ndarray,
    i3_t: np.ndarray,
) -> dict:
    """
    Calculate three-phase power metrics.

    Totals are arithmetic sums of the per-phase values, which is an
    approximation that holds for near-balanced systems.

    Args:
        v1_t, v2_t, v3_t: Voltage time-domain samples for phases 1, 2, 3
        i1_t, i2_t, i3_t: Current time-domain samples for phases 1, 2, 3

    Returns:
        Dictionary with per-phase and total power metrics and unbalance (%)
    """
    phases = [
        calculate_phase_power(v_t, i_t)
        for v_t, i_t in ((v1_t, i1_t), (v2_t, i2_t), (v3_t, i3_t))
    ]

    for num, phase in enumerate(phases, start=1):
        if phase["PF"] is None:
            logger.warning(
                "Phase L%d has zero apparent power, power factor undefined", num
            )

    p_total = sum(phase["P"] for phase in phases)
    s_total = sum(phase["S"] for phase in phases)
    q_total = sum(phase["Q"] for phase in phases if phase["Q"] is not None)
    pf_total = min(1.0, max(-1.0, p_total / s_total)) if s_total > 0 else None

    v_rms = [rms(v_t) for v_t in (v1_t, v2_t, v3_t)]
    i_rms = [rms(i_t) for i_t in (i1_t, i2_t, i3_t)]

    return {
        "P1": phases[0]["P"],
        "P2": phases[1]["P"],
        "P3": phases[2]["P"],
        "Q1": phases[0]["Q"],
        "Q2": phases[1]["Q"],
        "Q3": phases[2]["Q"],
        "S1": phases[0]["S"],
        "S2": phases[1]["S"],
        "S3": phases[2]["S"],
        "PF1": phases[0]["PF"],
        "PF2": phases[1]["PF"],
        "PF3": phases[2]["PF"],
        # Total power
        "P_total": p_total,
        "Q_total": q_total,
        "S_total": s_total,
        "PF_total": pf_total,
        # Balance indicators (%)
        "V_unbalance": calculate_unbalance(*v_rms),
        "I_unbalance": calculate_unbalance(*i_rms),
    }


# =============================================================================
# HARMONICS
# =============================================================================


def goertzel_magnitude(signal: np.ndarray, sampling_freq: float, target_freq: float) -> float:
    """
    Magnitude of a single frequency component using the Goertzel recursion.

    Args:
        signal: Time-domain samples
        sampling_freq: Sampling frequency (Hz)
        target_freq: Frequency to extract (Hz)

    Returns:
        sqrt(real^2 + imag^2) / N
    """
    samples = np.asarray(signal, dtype=np.float64).tolist()
    n = len(samples)
    if n == 0:
        return 0.0

    omega = 2 * math.pi * target_freq / sampling_freq
    cosine = math.cos(omega)
    coeff = 2 * cosine

    s_prev = 0.0
    s_prev2 = 0.0
    for x in samples:
        s = x + coeff * s_prev - s_prev2
        s_prev2 = s_prev
        s_prev = s

    real = s_prev - s_prev2 * cosine
    imag = s_prev2 * math.sin(omega)
    return math.sqrt(real**2 + imag**2) / n


def analyze_harmonics(
    signal: np.ndarray,
    sampling_freq: float,
    fundamental_freq: float,
    max_harmonic: int = HARMONIC_ORDERS[-1],
) -> dict[int, float]:
    """
    Extract harmonic magnitudes with the Goertzel algorithm.

    Returns:
        Dictionary {harmonic_number: magnitude} for harmonics 1 to max_harmonic
    """
    return {
        harmonic_num: goertzel_magnitude(
            signal, sampling_freq, fundamental_freq * harmonic_num
        )
        for harmonic_num in range(1, max_harmonic + 1)
    }


def calculate_thd(
    signal: np.ndarray,
    sampling_freq: float,
    fundamental_freq: float | None = None,
) -> float:
    """
    Calculate Total Harmonic Distortion (THD) of a demeaned signal.

    All harmonic orders 2..10 are summed. Orders at or above the Nyquist
    frequency alias back into the band and inflate the result, so the sampling
    rate should exceed 20 x f0 for an unbiased value.

    Args:
        signal: Demeaned time-domain samples
        sampling_freq: Sampling frequency (Hz)
        fundamental_freq: Fundamental frequency (Hz); the fallback frequency is
            used when it is None or NaN

    Returns:
        THD in percent
    """
    if fundamental_freq is None or not math.isfinite(fundamental_freq):
        fundamental_freq = FALLBACK_FREQ

    aliased = [k for k in HARMONIC_ORDERS if k * fundamental_freq >= sampling_freq / 2]
    if aliased:
        logger.debug(
            "Harmonic orders %s of %.2f Hz at or above Nyquist (fs=%g Hz), THD includes aliases",
            aliased,
            fundamental_freq,
            sampling_freq,
        )

    fundamental = goertzel_magnitude(signal, sampling_freq, fundamental_freq)
    harmonic_sum_squared = sum(
        goertzel_magnitude(signal, sampling_freq, fundamental_freq * k) ** 2
        for k in HARMONIC_ORDERS
    )

    return 100 * math.sqrt(harmonic_sum_squared) / max(fundamental, THD_EPSILON)
