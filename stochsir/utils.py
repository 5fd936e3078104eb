import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .reshape import ReshapedResult, summarize

COMPARTMENT_COLORS = {"S": "blue", "I": "red", "R": "green"}
COMPARTMENT_LABELS = {"S": "Susceptible (S)", "I": "Infected (I)", "R": "Recovered (R)"}


def replicate_alpha(n_replicates: int, lower_bound: float = 0.05) -> float:
    """
    Line transparency for replicate plots: max(10 / n_replicates, lower_bound), capped at 1.
    """
    return min(1.0, max(10 / n_replicates, lower_bound))


def compartment_color(name: str, index: int) -> str:
    if name in COMPARTMENT_COLORS:
        return COMPARTMENT_COLORS[name]
    cycle = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    return cycle[index % len(cycle)]


def _finish(fig, save_path: Optional[str]) -> None:
    if save_path:
        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(save_path, dpi=300, bbox_inches="tight")
        plt.close(fig)
    else:
        plt.show()
        plt.close(fig)


def _plot_replicate_lines(
    ax, result: ReshapedResult, alpha_lower_bound: float = 0.05
) -> None:
    """
    Helper function to draw one line per (compartment, replicate) on a given axes.
    """
    alpha = replicate_alpha(result.n_replicates, alpha_lower_bound)
    linewidth = 2 if result.n_replicates == 1 else 1

    for idx, name in enumerate(result.compartment_names):
        color = compartment_color(name, idx)
        values = result.compartment(name)
        lines = ax.plot(result.time, values, color=color, alpha=alpha, linewidth=linewidth)
        # One legend entry per compartment, drawn opaque
        if lines:
            lines[0].set_label(COMPARTMENT_LABELS.get(name, name))

    ax.set_xlabel("Time (days)")
    ax.set_ylabel("Number of people")
    leg = ax.legend()
    for handle in leg.legend_handles:
        handle.set_alpha(1.0)
    ax.grid(True, alpha=0.3)


def plot_replicates(
    result: ReshapedResult,
    ax=None,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    alpha_lower_bound: float = 0.05,
):
    """
    Plots every replicate of every compartment, colored by compartment.

    :param result: ReshapedResult to visualize
    :param ax: Optional axes to draw on. If given, the figure is neither saved nor shown
        and save_path must be None.
    :param title: Optional custom title
    :param save_path: Optional path to save the plot. If None, displays the plot.
    :param alpha_lower_bound: Minimum line transparency for dense replicate plots
    :return: The axes drawn on
    :raises ValueError: If both ax and save_path are given
    """
    if ax is not None and save_path is not None:
        raise ValueError(
            "save_path cannot be used together with ax; save the parent figure instead"
        )

    if title is None:
        if result.n_replicates == 1:
            title = "Stochastic SIR - single run"
        else:
            title = f"Stochastic SIR - {result.n_replicates} replicates"

    if ax is not None:
        _plot_replicate_lines(ax, result, alpha_lower_bound)
        ax.set_title(title, fontsize=12, fontweight="bold")
        return ax

    fig, ax = plt.subplots(figsize=(10, 6))
    _plot_replicate_lines(ax, result, alpha_lower_bound)
    ax.set_title(title, fontsize=14, fontweight="bold")

    info_text = f"Mean peak I: {np.mean(result.peak_infected):.1f}\n"
    info_text += f"Mean final size: {np.mean(result.final_size):.1f}"
    ax.text(
        0.98,
        0.5,
        info_text,
        transform=ax.transAxes,
        ha="right",
        va="center",
        bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.5),
        fontsize=9,
    )

    _finish(fig, save_path)
    return ax


def plot_summary(
    result: ReshapedResult,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
) -> None:
    """
    Plots the mean across replicates with a 95% band for each compartment.

    :param result: ReshapedResult to visualize
    :param title: Optional custom title
    :param save_path: Optional path to save the plot
    """
    if title is None:
        title = f"Stochastic SIR - mean and 95% interval ({result.n_replicates} replicates)"

    summary = summarize(result, quantiles=(0.025, 0.975))

    fig, ax = plt.subplots(figsize=(10, 6))
    for idx, name in enumerate(result.compartment_names):
        color = compartment_color(name, idx)
        rows = summary[summary["compartment"] == name]
        ax.plot(
            rows["t"], rows["mean"], color=color,
            label=COMPARTMENT_LABELS.get(name, name), linewidth=2,
        )
        ax.fill_between(rows["t"], rows["q0.025"], rows["q0.975"], color=color, alpha=0.2)

    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_xlabel("Time (days)")
    ax.set_ylabel("Number of people")
    ax.legend()
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path)


def plot_final_size_distribution(
    result: ReshapedResult,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
) -> None:
    """
    Histogram of the number recovered at the last time point across replicates.
    """
    if title is None:
        title = "Final epidemic size across replicates"

    fig, ax = plt.subplots(figsize=(8, 5))
    sns.histplot(
        x=result.final_size,
        ax=ax,
        color=compartment_color("R", 2),
        bins=min(30, max(1, result.n_replicates)),
    )
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_xlabel("Recovered at final time")
    ax.set_ylabel("Replicates")

    _finish(fig, save_path)


def log_results(result: ReshapedResult, log_dir: str = "logs", name: str = "run") -> str:
    """
    Logs simulation results to a text file with table format.

    For replicated runs the table shows the mean across replicates.

    :param result: ReshapedResult to log
    :param log_dir: Directory to save log files (default: "logs")
    :param name: Log file name without extension
    :return: Path of the written file
    """
    os.makedirs(log_dir, exist_ok=True)

    safe_name = name.replace(" ", "_").replace("-", "")
    log_path = os.path.join(log_dir, f"{safe_name}.txt")

    values = {
        compartment: result.compartment(compartment).astype(float).mean(axis=1)
        for compartment in result.compartment_names
    }
    width = 14 * len(result.compartment_names) + 10

    with open(log_path, "w", encoding="utf-8") as f:
        f.write(f"Simulation Log: {name}\n")
        f.write(f"Replicates: {result.n_replicates}\n")
        f.write("=" * width + "\n\n")

        header = f"{'Day':<8} " + " ".join(f"{c:<14}" for c in result.compartment_names)
        f.write(header.rstrip() + "\n")
        f.write("-" * width + "\n")

        for i, t in enumerate(result.time):
            row = f"{t:<8} " + " ".join(
                f"{values[c][i]:<14.2f}" for c in result.compartment_names
            )
            f.write(row.rstrip() + "\n")

        f.write("\n" + "=" * width + "\n")
        f.write("Summary Statistics:\n")
        if "I" in result.compartment_names:
            f.write(f"  Peak Infected (mean): {np.mean(result.peak_infected):.2f}\n")
            f.write(f"  Peak Time (mean): {np.mean(result.peak_time):.2f}\n")
            f.write(f"  Epidemic Duration (mean): {np.mean(result.epidemic_duration):.2f} days\n")
        if "R" in result.compartment_names:
            f.write(f"  Final Size (mean): {np.mean(result.final_size):.2f}\n")
            f.write(f"  Final Size (min/max): {np.min(result.final_size)}/{np.max(result.final_size)}\n")

    return log_path
