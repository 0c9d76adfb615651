"""MACSForge plotting module."""

from macsforge.plots.macs import (
    HAS_MATPLOTLIB,
    apply_plot_style,
    maxwellian_weight,
    plot_cross_section_weighting,
    plot_macs_vs_temperature,
)

__all__ = [
    'HAS_MATPLOTLIB',
    'apply_plot_style',
    'maxwellian_weight',
    'plot_cross_section_weighting',
    'plot_macs_vs_temperature',
]
