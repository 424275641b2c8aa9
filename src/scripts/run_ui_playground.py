"""
Interactive Streamlit application for three-phase power analysis.

Usage:
    streamlit run src/scripts/run_ui_playground.py
"""

import json
import sys
from pathlib import Path

import streamlit as st

# Add parent directory to path to import from src/
sys.path.insert(0, str(Path(__file__).parent.parent))

from assistant import (
    DECISION_CATEGORIES,
    PROCESSING_MODES,
    AnalysisError,
    GeminiClient,
)
from power_analytics import (
    EXAMPLES,
    WaveformBatch,
    build_baseline,
    create_example,
    merge_results,
    plot_harmonic_spectrum,
    plot_three_phase_waveforms,
    validate_payload,
)

PLACEHOLDER = """{
  "voltage_L1": [120.5, 121.0, 119.8, ...],
  "voltage_L2": [120.2, 120.8, 119.9, ...],
  "voltage_L3": [120.0, 120.3, 120.1, ...],
  "current_L1": [15.2, 15.1, 15.3, ...],
  "current_L2": [15.0, 15.2, 15.1, ...],
  "current_L3": [15.1, 15.0, 15.2, ...],
  "sampling_rate_hz": 1000
}"""


def fmt(value, unit="", decimals=2):
    """Format a metric that may be None"""
    if value is None:
        return "n/a"
    return f"{value:.{decimals}f} {unit}".strip()


def render_input_panel():
    """Render example loader and JSON input; returns a batch or None"""
    st.sidebar.header("Example Datasets")
    for name, description in EXAMPLES.items():
        if st.sidebar.button(description, key=f"example_{name}"):
            st.session_state.input_data = json.dumps(create_example(name).to_dict())

    st.subheader("Three-Phase Data Input")
    text = st.text_area(
        "Input your three-phase electrical data in JSON format",
        key="input_data",
        height=250,
        placeholder=PLACEHOLDER,
    )

    if not text.strip():
        st.info("No Data")
        return None

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        st.error("Invalid JSON format")
        return None

    errors = validate_payload(payload)
    if errors:
        for error in errors:
            st.error(error)
        return None

    st.success("Valid")
    return WaveformBatch.from_dict(payload)


def analysis_for_input(
    client: GeminiClient, batch: WaveformBatch, mode: str, text: str, state
) -> dict:
    """
    Gemini analysis for the current input, reused across Streamlit reruns.

    Args:
        client: Gemini client
        batch: Batch parsed from text
        mode: Processing mode
        text: Raw JSON input the batch was parsed from
        state: Session state mapping holding the cached analysis

    Returns:
        External analysis; a new request is made only when text or mode change
    """
    key = (text, mode)
    cached = state.get("gemini_analysis")
    if cached is None or cached["key"] != key:
        cached = {"key": key, "analysis": client.analyze(batch, mode)}
        state["gemini_analysis"] = cached
    return cached["analysis"]


def render_results(results: dict):
    """Render merged metrics"""
    rms = results["rms_values"]
    power = results["power_analysis"]
    quality = results["quality_metrics"]
    angles = results["phase_angles_degrees"]

    if results.get("analysis_summary"):
        st.markdown(f"**Summary:** {results['analysis_summary']}")

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("System Frequency", fmt(results["frequency_hz"], "Hz", 1))
        st.metric("Phase Sequence", results["phase_sequence"])

    with col2:
        st.metric("Active Power", fmt(power["active_power"]["total"], "kW", 3))
        st.metric("Reactive Power", fmt(power["reactive_power"]["total"], "kVAR", 3))

    with col3:
        st.metric("Apparent Power", fmt(power["apparent_power"]["total"], "kVA", 3))
        st.metric("Power Factor", fmt(power["power_factor"]["total"], decimals=3))

    with col4:
        st.metric("Voltage Unbalance", fmt(quality["voltage_unbalance_percent"], "%"))
        st.metric("Current Unbalance", fmt(quality["current_unbalance_percent"], "%"))

    st.subheader("Per-Phase Metrics")
    table = []
    for phase in ("L1", "L2", "L3"):
        table.append(
            {
                "Phase": phase,
                "V RMS (V)": fmt(rms["voltage"][phase]),
                "I RMS (A)": fmt(rms["current"][phase]),
                "P (kW)": fmt(power["active_power"][phase], decimals=3),
                "Q (kVAR)": fmt(power["reactive_power"][phase], decimals=3),
                "S (kVA)": fmt(power["apparent_power"][phase], decimals=3),
                "PF": fmt(power["power_factor"][phase], decimals=3),
                "V-I angle (°)": fmt(angles[f"voltage_{phase}_vs_current_{phase}"], decimals=1),
                "THD V (%)": fmt(quality["thd_voltage"][phase]),
                "THD I (%)": fmt(quality["thd_current"][phase]),
            }
        )
    st.table(table)

    notes = results.get("analysis_notes")
    if isinstance(notes, dict):
        st.subheader("Analysis Notes")
        for key in ("observations", "recommendations"):
            items = notes.get(key)
            if isinstance(items, list) and items:
                st.write(f"**{key.capitalize()}**")
                for item in items:
                    st.write(f"- {item}")

    with st.expander("Raw JSON"):
        st.json(results)


def render_decisions(client: GeminiClient, results: dict):
    """Render AI decision suggestions for the current results"""
    st.subheader("Decisions")
    category = st.selectbox("Category", list(DECISION_CATEGORIES), key="decision_category")
    if st.button("Suggest Decisions"):
        try:
            decisions = client.generate_decisions(results, category)
        except AnalysisError as e:
            st.error(str(e))
            return
        for decision in decisions:
            st.write(
                f"**{decision.get('title', 'Untitled')}** "
                f"({decision.get('priority', 'medium')})"
            )
            st.write(decision.get("description", ""))
            if decision.get("reasoning"):
                st.caption(decision["reasoning"])


def main():
    """Main Streamlit application"""
    st.set_page_config(page_title="Gemini Power Lab", layout="wide")
    st.title("Gemini Power Lab")
    st.markdown("*Three-Phase Electrical Systems Analysis*")

    st.sidebar.header("Configuration")
    mode = st.sidebar.radio(
        "Processing Mode",
        list(PROCESSING_MODES),
        format_func=lambda key: PROCESSING_MODES[key].split(":")[0],
    )
    use_ai = st.sidebar.checkbox("Request Gemini analysis", value=False)

    batch = render_input_panel()
    if batch is None:
        return

    baseline = build_baseline(batch)
    external = None
    client = None

    if use_ai:
        try:
            client = GeminiClient()
            with st.spinner("Gemini AI is analyzing your power systems data..."):
                external = analysis_for_input(
                    client, batch, mode, st.session_state.input_data, st.session_state
                )
        except AnalysisError as e:
            st.warning(f"Gemini analysis unavailable, showing computed values: {e}")

    results = merge_results(baseline, external)

    st.header("Analysis Results")
    render_results(results)

    st.subheader("Waveforms")
    fig = plot_three_phase_waveforms(
        batch, p_total=baseline["power_analysis"]["active_power"]["total"]
    )
    st.plotly_chart(fig, width="stretch")

    st.subheader("Harmonics")
    st.plotly_chart(
        plot_harmonic_spectrum(batch, baseline["frequency_hz"]), width="stretch"
    )

    if client is not None:
        render_decisions(client, results)


if __name__ == "__main__":
    main()
