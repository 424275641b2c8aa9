"""Single entry point: waveform batch (+ optional external analysis) to merged metrics"""

from .baseline import build_baseline
from .merge import merge_results
from .models import WaveformBatch


def analyze_power_data(batch: WaveformBatch, external=None) -> dict:
    """
    Run the deterministic baseline and merge an optional external analysis.

    Args:
        batch: Validated three-phase waveform batch
        external: External analysis (may be None, partial or malformed)

    Returns:
        Merged metrics dictionary
    """
    return merge_results(build_baseline(batch), external)
