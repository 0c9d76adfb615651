"""Maxwellian averaging of pointwise cross sections."""

from macsforge.physics.maxwellian import (
    TWO_OVER_SQRT_PI,
    MACSResult,
    MaxwellianIntegrator,
    compute_macs,
    maxwellian_weight_fraction,
)

__all__ = [
    "TWO_OVER_SQRT_PI",
    "MACSResult",
    "MaxwellianIntegrator",
    "compute_macs",
    "maxwellian_weight_fraction",
]
