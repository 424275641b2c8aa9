"""
Plotting functions for three-phase analysis visualization.
"""

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from utils import demean

from .analytics import FALLBACK_FREQ, analyze_harmonics
from .models import WaveformBatch

PHASE_COLORS = ["blue", "green", "red"]


def plot_three_phase_waveforms(
    batch: WaveformBatch,
    p_total: float | None = None,
    title: str = "Three-Phase Power Analysis",
    show: bool = False,
) -> go.Figure:
    """
    Plot three-phase voltages, currents, and instantaneous power.

    Args:
        batch: Waveform batch to plot
        p_total: Total average active power (kW), drawn as a dashed line
        title: Plot title
        show: Open the figure in a browser

    Returns:
        Plotly figure
    """
    time_ms = batch.time * 1000

    fig = make_subplots(
        rows=3,
        cols=1,
        shared_xaxes=True,
        vertical_spacing=0.06,
        subplot_titles=(
            "Three-Phase Voltages",
            "Three-Phase Currents",
            "Instantaneous Power per Phase",
        ),
    )

    for v, name, color in zip(batch.voltages, ["V1", "V2", "V3"], PHASE_COLORS):
        fig.add_trace(
            go.Scatter(x=time_ms, y=v, mode="lines", name=name, line=dict(color=color)),
            row=1,
            col=1,
        )

    # Currents (same colors as voltages for each phase)
    for current, name, color in zip(batch.currents, ["I1", "I2", "I3"], PHASE_COLORS):
        fig.add_trace(
            go.Scatter(
                x=time_ms, y=current, mode="lines", name=name, line=dict(color=color)
            ),
            row=2,
            col=1,
        )

    colors_p = ["cyan", "lime", "orange"]
    for v, current, name, color in zip(
        batch.voltages, batch.currents, ["P1(t)", "P2(t)", "P3(t)"], colors_p
    ):
        fig.add_trace(
            go.Scatter(
                x=time_ms,
                y=v * current / 1000,
                mode="lines",
                name=name,
                line=dict(color=color),
            ),
            row=3,
            col=1,
        )

    if p_total is not None:
        fig.add_trace(
            go.Scatter(
                x=time_ms,
                y=[p_total] * len(time_ms),
                mode="lines",
                name=f"P_total_avg = {p_total:.2f}kW",
                line=dict(color="black", dash="dash", width=2),
            ),
            row=3,
            col=1,
        )

    fig.update_xaxes(title_text="Time (ms)", row=3, col=1)
    fig.update_yaxes(title_text="Voltage (V)", row=1, col=1)
    fig.update_yaxes(title_text="Current (A)", row=2, col=1)
    fig.update_yaxes(title_text="Power (kW)", row=3, col=1)

    fig.update_layout(title_text=title, height=1000, showlegend=True)

    if show:
        fig.show()
    return fig


def plot_harmonic_spectrum(
    batch: WaveformBatch,
    frequency_hz: float | None = None,
    title: str = "Harmonic Magnitudes (% of fundamental)",
    show: bool = False,
) -> go.Figure:
    """
    Bar chart of Goertzel harmonic magnitudes relative to the fundamental.

    Args:
        batch: Waveform batch
        frequency_hz: Fundamental frequency (Hz), fallback frequency when None
        title: Plot title
        show: Open the figure in a browser

    Returns:
        Plotly figure
    """
    f0 = frequency_hz or FALLBACK_FREQ
    fig = make_subplots(rows=1, cols=2, subplot_titles=("Voltage", "Current"))

    for col, channels, prefix in ((1, batch.voltages, "V"), (2, batch.currents, "I")):
        for num, (signal, color) in enumerate(zip(channels, PHASE_COLORS), start=1):
            harmonics = analyze_harmonics(demean(signal), batch.sampling_rate_hz, f0)
            fundamental = max(harmonics[1], 1e-12)
            orders = list(harmonics)[1:]
            fig.add_trace(
                go.Bar(
                    x=orders,
                    y=[100 * harmonics[h] / fundamental for h in orders],
                    name=f"{prefix}{num}",
                    marker_color=color,
                ),
                row=1,
                col=col,
            )

    fig.update_xaxes(title_text="Harmonic order", tickvals=np.arange(2, 11))
    fig.update_yaxes(title_text="% of fundamental", row=1, col=1)
    fig.update_layout(title_text=title, barmode="group", height=450)

    if show:
        fig.show()
    return fig
