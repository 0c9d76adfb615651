"""
MACS Visualization Module

Plots for checking a MACS calculation:
- cross section with the Maxwellian weight E exp(-E/theta) of each temperature
- MACS against temperature
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

try:
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from macsforge.data.crosssections import CrossSectionCurve


PLOT_STYLE = {
    "figure.figsize": (10, 7),
    "font.size": 12,
    "axes.labelsize": 14,
    "axes.titlesize": 14,
    "legend.fontsize": 11,
    "lines.linewidth": 1.5,
    "axes.grid": True,
    "grid.alpha": 0.3,
    "grid.linestyle": "--",
}


def apply_plot_style():
    """Apply publication-quality plot style."""
    if HAS_MATPLOTLIB:
        plt.rcParams.update(PLOT_STYLE)


def maxwellian_weight(energies_keV: np.ndarray, theta_keV: float) -> np.ndarray:
    """Normalised weight E exp(-E/theta) / theta^2 (integrates to 1)."""
    energies_keV = np.asarray(energies_keV, dtype=float)
    return energies_keV * np.exp(-energies_keV / theta_keV) / theta_keV ** 2


def plot_cross_section_weighting(
    curve: CrossSectionCurve,
    temperatures_keV: Sequence[float],
    reduced_mass_factor: float = 1.0,
    title: Optional[str] = None,
    n_points: int = 2000,
    figsize: Tuple[float, float] = (10, 7),
    save_path: Optional[Union[str, Path]] = None,
) -> Any:
    """
    Plot a cross section together with the Maxwellian weight at each kT.

    Parameters
    ----------
    curve : CrossSectionCurve
        Cross section in keV / mb
    temperatures_keV : sequence of float
        Temperatures whose weights are overlaid
    reduced_mass_factor : float
        a = A/(1+A); weights are drawn at theta = kT / a in lab energy
    title : str, optional
        Plot title (defaults to the curve label)
    n_points : int
        Log-spaced points for the cross section line
    figsize : tuple
        Figure size
    save_path : str or Path, optional
        Save figure to path

    Returns
    -------
    fig, (ax_xs, ax_weight)
        Matplotlib figure, cross section axes and twin weight axes
    """
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for plotting")

    apply_plot_style()
    fig, ax_xs = plt.subplots(figsize=figsize)

    energies = np.geomspace(curve.min_energy, curve.max_energy, n_points)
    ax_xs.loglog(energies, curve.evaluate(energies), color="#1f77b4", label="cross section")
    ax_xs.set_xlabel("Energy (keV)")
    ax_xs.set_ylabel("Cross Section (mb)")

    ax_weight = ax_xs.twinx()
    for kt in temperatures_keV:
        theta = kt / reduced_mass_factor
        ax_weight.semilogx(energies, maxwellian_weight(energies, theta), linestyle="--",
                           label=f"kT = {kt:g} keV")
    ax_weight.set_ylabel("Maxwellian weight (1/keV)")
    ax_weight.grid(False)

    lines = ax_xs.get_lines() + ax_weight.get_lines()
    ax_xs.legend(lines, [line.get_label() for line in lines], loc="best", fontsize=9)
    ax_xs.set_title(title or curve.label or "Cross section and Maxwellian weights")

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig, (ax_xs, ax_weight)


def plot_macs_vs_temperature(
    report,
    figsize: Tuple[float, float] = (8, 6),
    save_path: Optional[Union[str, Path]] = None,
) -> Any:
    """
    Plot MACS against kT for a MACSReport.

    Returns
    -------
    fig, ax
        Matplotlib figure and axes
    """
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for plotting")

    apply_plot_style()
    fig, ax = plt.subplots(figsize=figsize)

    order = np.argsort(report.temperatures_keV)
    temps = np.asarray(report.temperatures_keV)[order]
    macs = np.asarray(report.macs_mb)[order]
    ax.plot(temps, macs, "o-", color="#d62728")
    ax.set_xlabel("kT (keV)")
    ax.set_ylabel("MACS (mb)")
    ax.set_title(f"MACS: {report.title}")

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches="tight")

    return fig, ax
