"""Shape checks for incoming three-phase waveform payloads"""

import math
from numbers import Real

VOLTAGE_CHANNELS = ("voltage_L1", "voltage_L2", "voltage_L3")
CURRENT_CHANNELS = ("current_L1", "current_L2", "current_L3")
CHANNELS = VOLTAGE_CHANNELS + CURRENT_CHANNELS
REQUIRED_FIELDS = CHANNELS + ("sampling_rate_hz",)

MIN_SAMPLES = 2


def is_finite_number(value) -> bool:
    """Real, not bool, and finite; ints too large for a float are rejected."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def validate_payload(payload) -> list[str]:
    """
    Validate a JSON-shaped waveform payload.

    Args:
        payload: Mapping with voltage_L1..current_L3 sample lists and sampling_rate_hz

    Returns:
        List of error messages (empty when the payload is valid)
    """
    if not isinstance(payload, dict):
        return ["Input data must be a JSON object"]

    errors = [
        f"Missing required field: {field}"
        for field in REQUIRED_FIELDS
        if field not in payload
    ]
    if errors:
        return errors

    for channel in CHANNELS:
        samples = payload[channel]
        if not isinstance(samples, (list, tuple)):
            errors.append(f"{channel} must be an array")
            continue
        if len(samples) == 0:
            errors.append(f"{channel} array cannot be empty")
            continue
        if not all(is_finite_number(value) for value in samples):
            errors.append(f"{channel} must contain only finite numbers")

    if not is_finite_number(payload["sampling_rate_hz"]) or payload["sampling_rate_hz"] <= 0:
        errors.append("sampling_rate_hz must be a positive number")

    if not errors:
        lengths = {len(payload[channel]) for channel in CHANNELS}
        if len(lengths) != 1:
            errors.append("All voltage and current arrays must have the same length")
        elif lengths.pop() < MIN_SAMPLES:
            errors.append(f"Arrays must contain at least {MIN_SAMPLES} samples")

    return errors
