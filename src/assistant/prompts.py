"""Prompt text for the Gemini analysis and decision requests"""

import json

from power_analytics.models import WaveformBatch
from power_analytics.validation import CURRENT_CHANNELS, VOLTAGE_CHANNELS
from utils import calculate_stats

PROCESSING_MODES = {
    "waveform": "Waveform Analysis: RMS, peak values, frequency detection",
    "power_quality": "Power Quality: harmonics, THD, power factor calculations",
    "fault_detection": "Fault Detection: anomaly identification in three-phase systems",
    "load_analysis": "Load Analysis: active, reactive, and apparent power calculations",
}

DECISION_CATEGORIES = {
    "technical": """Based on the power system analysis results, suggest 2-3 technical decisions that should be made. Focus on:
    - System optimization opportunities
    - Equipment maintenance needs
    - Technical upgrades or modifications
    - Safety improvements""",
    "operational": """Based on the power system analysis results, suggest 2-3 operational decisions. Focus on:
    - Load management strategies
    - Operational efficiency improvements
    - Maintenance scheduling
    - Performance monitoring adjustments""",
    "strategic": """Based on the power system analysis results, suggest 2-3 strategic decisions. Focus on:
    - Long-term capacity planning
    - Infrastructure investments
    - Risk management strategies
    - System expansion considerations""",
    "team": """Based on the power system analysis results, suggest 2-3 team and resource decisions. Focus on:
    - Training requirements
    - Resource allocation
    - Staffing considerations
    - Skill development needs""",
}

OUTPUT_FORMAT = """{
  "rms_values": {
    "voltage": {"L1": 230.5, "L2": 229.8, "L3": 231.2, "units": "V"},
    "current": {"L1": 10.2, "L2": 10.1, "L3": 10.3, "units": "A"},
    "line_to_line_voltage": {"L12": 398.4, "L23": 399.1, "L31": 398.8, "units": "V"}
  },
  "peak_values": {
    "voltage": {"L1": 325.9, "L2": 325.1, "L3": 326.4, "units": "V"},
    "current": {"L1": 14.4, "L2": 14.3, "L3": 14.6, "units": "A"}
  },
  "frequency_hz": 50.02,
  "phase_sequence": "positive",
  "phase_angles_degrees": {
    "voltage_L1_vs_voltage_L2": -120.1, "voltage_L2_vs_voltage_L3": -119.9,
    "voltage_L3_vs_voltage_L1": -120.0, "voltage_L1_vs_current_L1": -11.5,
    "voltage_L2_vs_current_L2": -12.0, "voltage_L3_vs_current_L3": -11.2
  },
  "power_analysis": {
    "active_power": {"L1": 2.15, "L2": 2.12, "L3": 2.18, "total": 6.45, "units": "kW"},
    "reactive_power": {"L1": 0.43, "L2": 0.45, "L3": 0.41, "total": 1.29, "units": "kVAR"},
    "apparent_power": {"L1": 2.19, "L2": 2.16, "L3": 2.22, "total": 6.57, "units": "kVA"},
    "power_factor": {"L1": 0.98, "L2": 0.98, "L3": 0.98, "total": 0.98}
  },
  "quality_metrics": {
    "voltage_unbalance_percent": 0.8,
    "current_unbalance_percent": 1.2,
    "thd_voltage": {"L1": 1.2, "L2": 1.3, "L3": 1.1, "units": "%"},
    "thd_current": {"L1": 3.5, "L2": 3.7, "L3": 3.3, "units": "%"}
  },
  "analysis_notes": {
    "summary": "Balanced system with minor unbalance",
    "data_quality": "Good quality data with minimal noise",
    "observations": ["Slight voltage unbalance detected (0.8%)"],
    "recommendations": ["Monitor voltage unbalance over time"]
  },
  "calculation_methods": {
    "rms": "True RMS calculation using complete dataset",
    "frequency": "Zero-crossing detection",
    "phase_angles": "Cross-correlation method",
    "harmonics": "Goertzel magnitudes up to the 10th harmonic"
  },
  "confidence_scores": {
    "overall_quality": 0.92,
    "voltage_analysis": 0.95,
    "current_analysis": 0.93,
    "power_analysis": 0.94
  }
}"""


def _channel_summary(batch: WaveformBatch, channels, unit: str) -> str:
    lines = []
    for channel in channels:
        stats = calculate_stats(getattr(batch, channel))
        lines.append(
            f"- {channel[-2:]}: {batch.num_samples} samples "
            f"(min: {stats['min']:.3f}{unit}, max: {stats['max']:.3f}{unit}, "
            f"avg: {stats['mean']:.3f}{unit})"
        )
    return "\n".join(lines)


def _first_samples(batch: WaveformBatch, channels, count: int = 5) -> str:
    return "\n".join(
        f"- {channel[-2:]}: [{', '.join(f'{x:g}' for x in getattr(batch, channel)[:count])}]"
        for channel in channels
    )


def build_analysis_prompt(batch: WaveformBatch, mode: str = "waveform") -> str:
    """Prompt asking the model for a three-phase analysis in the merge-compatible JSON shape"""
    fs = batch.sampling_rate_hz
    focus = PROCESSING_MODES.get(mode, PROCESSING_MODES["waveform"])

    return f"""
# Three-Phase Power System Analysis

## System Parameters
- Sampling Rate: {fs:g} Hz
- Samples per cycle: {round(fs / 50)} (assuming 50Hz system)
- Total duration: {batch.num_samples / fs:.3f} seconds
- Processing mode: {focus}

## Input Data Summary
### Voltage (V)
{_channel_summary(batch, VOLTAGE_CHANNELS, "V")}

### Current (A)
{_channel_summary(batch, CURRENT_CHANNELS, "A")}

## Analysis Request
Perform a detailed three-phase power system analysis:
1. RMS values using the complete dataset
2. Peak values (absolute maximum)
3. Frequency (zero-crossing or FFT)
4. Phase angles between all voltage pairs and each voltage/current pair
   (angle of the second signal relative to the first, negative when lagging)
5. Active, reactive and apparent power and power factor per phase and total
6. Voltage/current unbalance and THD per phase

### Expected Output Format
{OUTPUT_FORMAT}

## Important Notes
1. Respond with a single JSON object in the format above
2. Use null for any value that cannot be calculated
3. Flag any potential data quality issues in analysis_notes

## Data Sample (first 5 points for reference)
### Voltage (V)
{_first_samples(batch, VOLTAGE_CHANNELS)}

### Current (A)
{_first_samples(batch, CURRENT_CHANNELS)}
"""


def build_decision_prompt(results: dict, category: str = "technical") -> str:
    """Prompt asking for 2-3 decisions (JSON array) based on merged analysis results"""
    instructions = DECISION_CATEGORIES.get(category, DECISION_CATEGORIES["technical"])

    return f"""You are an expert power systems engineer analyzing electrical data.

{instructions}

Analysis Results:
{json.dumps(results, indent=2)}

Please respond with ONLY a JSON array of decision objects. Each decision should have:
- title: string (concise decision title)
- description: string (detailed explanation)
- priority: "low" | "medium" | "high"
- reasoning: string (why this decision is important based on the analysis)

Format your response as a JSON array with 2-3 decisions. No other text or formatting.
"""
