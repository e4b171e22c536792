"""Chart generation for Monte Carlo results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from retirement_mc.monte_carlo import MonteCarloResult

BAND_COLOR = "#1f77b4"


def _format_money_axis(ax: plt.Axes):
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"${x / 1000:,.0f}k" if x != 0 else "0")
    )


def plot_confidence_fan(mc: MonteCarloResult, output_path: Path, name: str = "") -> Path:
    """Generate a fan chart of the per-age capital confidence intervals.

    Args:
        mc: run_simulation() result.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "couple" → "mc_fan-couple.png").

    Returns:
        Path to the generated PNG file.
    """
    intervals = mc.result.confidence_intervals
    if not intervals:
        raise ValueError("No confidence intervals to plot")

    ages = [ci.age for ci in intervals]
    fig, ax = plt.subplots(figsize=(12, 7))
    ax.fill_between(ages, [ci.lower95 for ci in intervals], [ci.upper95 for ci in intervals],
                    alpha=0.15, color=BAND_COLOR, label="P2.5–P97.5")
    ax.fill_between(ages, [ci.lower50 for ci in intervals], [ci.upper50 for ci in intervals],
                    alpha=0.3, color=BAND_COLOR, label="P25–P75")
    ax.plot(ages, [ci.median for ci in intervals], color=BAND_COLOR, linewidth=2, label="Median")

    ax.set_xlabel("Age")
    ax.set_ylabel("Capital")
    ax.set_title(
        f"Monte Carlo projection (N={mc.n_simulations:,}, success {mc.result.success_rate:.1f}%)"
    )
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_money_axis(ax)
    fig.tight_layout()

    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"mc_fan{suffix}.png"
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return filepath
