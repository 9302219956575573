# Licensed under the PolyForm Noncommercial License 1.0.0
"""Plotting functions for ascent simulation results."""

from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from .models import SimulationResult


def plot_results(result: SimulationResult, show: bool = True, save_path: Optional[str] = None) -> None:
    """
    Plot simulation results.

    Args:
        result: Result of a simulation run
        show: Whether to display the plot
        save_path: If provided, save the plot to this path
    """
    if not result.trajectory:
        raise ValueError(f"nothing to plot: run ended with status '{result.status.value}'")

    data = result.as_arrays()
    t = data['time']
    stages = data['stage']

    fig, axes = plt.subplots(2, 3, figsize=(15, 10))

    # Define colours for stages
    unique_stages = np.unique(stages)
    colors = plt.cm.viridis(np.linspace(0, 1, len(unique_stages)))

    panels = [
        (axes[0, 0], data['x'] / 1000, data['altitude'] / 1000, "Trajectory", "Downrange [km]", "Altitude [km]"),
        (axes[0, 1], t, data['altitude'] / 1000, "Altitude vs Time", "Time [s]", "Altitude [km]"),
        (axes[0, 2], t, data['velocity'], "Speed vs Time", "Time [s]", "Speed [m/s]"),
        (axes[1, 0], t, data['acceleration'], "Acceleration vs Time", "Time [s]", "Acceleration [m/s²]"),
        (axes[1, 1], t, data['thrust'] / 1000, "Thrust vs Time", "Time [s]", "Thrust [kN]"),
        (axes[1, 2], t, data['mass'] / 1000, "Mass vs Time", "Time [s]", "Mass [t]"),
    ]

    for ax, x, y, title, xlabel, ylabel in panels:
        for stage_num, color in zip(unique_stages, colors):
            mask = stages == stage_num
            ax.plot(x[mask], y[mask], color=color, label=f"Stage {int(stage_num)}")
        ax.set_title(title)
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.legend()

    params = result.optimal_params
    if params is not None:
        axes[0, 1].axhline(params.stage_separation_altitude / 1000, color='grey', ls='--', lw=0.8)
        axes[0, 2].axhline(params.effective_required_velocity, color='grey', ls='--', lw=0.8,
                           label="Required velocity")
        axes[0, 2].legend()

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
    if show:
        plt.show()

    plt.close(fig)
