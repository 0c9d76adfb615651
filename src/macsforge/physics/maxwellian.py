"""
Maxwellian-Averaged Cross Sections

Computes the MACS of a pointwise cross section for a Maxwell-Boltzmann
neutron spectrum of temperature kT:

    MACS(kT) = 2/sqrt(pi) * Int sigma(E) E exp(-E/kT) dE / Int E exp(-E/kT) dE

The denominator is (kT)^2 in closed form and is never integrated
numerically. For lab-frame data on a target of mass number A the energy is
scaled by a = A/(1+A), giving

    MACS(kT) = 2/sqrt(pi) * (a/kT)^2 * Int sigma(E) E exp(-a E/kT) dE

i.e. the same expression with an effective temperature theta = kT/a.

The numerator is only known on the sampled energy range, so the integral
is truncated to the curve's domain (and to ``tail_cutoff_kt`` * theta above
it). The share of Maxwellian weight actually integrated is reported as
``weight_coverage``; anything below 1 is a systematic underestimate, and
below ``min_weight_coverage`` (default 0.5) the calculation is refused.

Two rules are available. 'gauss' (default) integrates the interpolated
curve with composite Gauss-Legendre panels. 'trapezoid' sums
0.5 * (f_i + f_i+1) * (E_i+1 - E_i) over every pair of adjacent samples of
the whole domain, which reproduces published tables computed that way.

References:
    Z.Y. Bao et al., "Neutron cross sections for nucleosynthesis studies",
    Atomic Data and Nuclear Data Tables 76, 70-154 (2000).

    B. Pritychenko et al., "Calculations of Maxwellian-averaged cross
    sections and astrophysical reaction rates using the ENDF/B-VII.0,
    JEFF-3.1, JENDL-3.3, and ENDF/B-VI.8 evaluated nuclear reaction data
    libraries", Atomic Data and Nuclear Data Tables 96, 645-748 (2010).
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.polynomial.legendre import leggauss
from scipy.integrate import trapezoid

from macsforge.core.config import MACSConfig, QUADRATURE_METHODS, check_temperature
from macsforge.core.errors import AccuracyWarning, InsufficientDataError, InvalidInputError
from macsforge.data.crosssections import CrossSectionCurve

logger = logging.getLogger(__name__)

TWO_OVER_SQRT_PI = 2.0 / math.sqrt(math.pi)

# Panels narrower than theta / MIN_PANELS_PER_KT resolve the weight
MIN_PANELS_PER_KT = 4


@dataclass(frozen=True)
class MACSResult:
    """
    MACS at one temperature.

    Attributes
    ----------
    temperature_keV : float
        Maxwellian temperature kT
    macs_mb : float
        Maxwellian-averaged cross section in millibarn
    weight_coverage : float
        Fraction of the Maxwellian weight E exp(-E/theta) inside the
        integrated energy range
    n_nodes : int
        Integrand evaluations used
    method : str
        Quadrature rule
    """

    temperature_keV: float
    macs_mb: float
    weight_coverage: float = 1.0
    n_nodes: int = 0
    method: str = "gauss"

    def as_tuple(self) -> Tuple[float, float]:
        return self.temperature_keV, self.macs_mb


def maxwellian_weight_fraction(lower_keV: float, upper_keV: float, theta_keV: float) -> float:
    """
    Share of Int_0^inf E exp(-E/theta) dE lying in [lower, upper].

    Uses the cumulative form F(x) = 1 - (1 + x) exp(-x), x = E/theta.
    """
    def cdf(x: float) -> float:
        if math.isinf(x):
            return 1.0
        return -math.expm1(-x) - x * math.exp(-x)

    return max(0.0, cdf(upper_keV / theta_keV) - cdf(lower_keV / theta_keV))


def _check_resolution(widest_keV: float, theta_keV: float) -> None:
    if widest_keV > theta_keV / MIN_PANELS_PER_KT:
        warnings.warn(
            f"Quadrature steps up to {widest_keV:.3g} keV are coarser than "
            f"kT/a/{MIN_PANELS_PER_KT} = {theta_keV / MIN_PANELS_PER_KT:.3g} keV; "
            f"MACS accuracy is at risk",
            AccuracyWarning,
            stacklevel=4,
        )


class MaxwellianIntegrator:
    """
    MACS calculator for one cross section curve.

    Parameters
    ----------
    curve : CrossSectionCurve
        Cross section in keV / millibarn
    mass_number : int, optional
        Target mass number A for the lab-to-centre-of-mass conversion.
        None treats the energies as already centre-of-mass (a = 1).
    method : str
        'gauss' for composite Gauss-Legendre on the interpolated curve,
        'trapezoid' for the trapezoidal rule on the raw samples
    panels_per_kt : int
        Gauss panels per effective temperature
    gauss_order : int
        Nodes per Gauss panel
    tail_cutoff_kt : float
        Upper limit in effective temperatures
    max_panels : int
        Cap on the number of Gauss panels
    coverage_warning : float
        Warn when weight coverage drops below this
    min_weight_coverage : float
        Raise InsufficientDataError below this coverage (0 raises only when
        the domain holds no weight at all)

    Examples
    --------
    >>> curve = CrossSectionCurve.from_points([(1e-3, 100.0), (1e4, 100.0)])
    >>> integrator = MaxwellianIntegrator(curve)
    >>> round(integrator.macs(30.0), 3)
    112.838
    """

    def __init__(
        self,
        curve: CrossSectionCurve,
        mass_number: Optional[float] = None,
        method: str = "gauss",
        panels_per_kt: int = 16,
        gauss_order: int = 4,
        tail_cutoff_kt: float = 50.0,
        max_panels: int = 2_000_000,
        coverage_warning: float = 0.999,
        min_weight_coverage: float = 0.5,
    ):
        if method not in QUADRATURE_METHODS:
            raise InvalidInputError(f"Unknown quadrature method '{method}'")
        if mass_number is not None and not mass_number > 0:
            raise InvalidInputError(f"Mass number must be positive, got {mass_number!r}")
        if panels_per_kt < 1 or gauss_order < 1 or max_panels < 1:
            raise InvalidInputError("panels_per_kt, gauss_order and max_panels must be >= 1")
        if not tail_cutoff_kt > 0:
            raise InvalidInputError("tail_cutoff_kt must be positive")

        self.curve = curve
        self.mass_number = mass_number
        self.method = method
        self.panels_per_kt = int(panels_per_kt)
        self.gauss_order = int(gauss_order)
        self.tail_cutoff_kt = float(tail_cutoff_kt)
        self.max_panels = int(max_panels)
        self.coverage_warning = float(coverage_warning)
        self.min_weight_coverage = float(min_weight_coverage)
        self._xi, self._wi = leggauss(self.gauss_order)

    @classmethod
    def from_config(
        cls,
        curve: CrossSectionCurve,
        config: MACSConfig,
        mass_number: Optional[float] = None,
    ) -> "MaxwellianIntegrator":
        return cls(
            curve,
            mass_number=mass_number,
            method=config.method,
            panels_per_kt=config.panels_per_kt,
            gauss_order=config.gauss_order,
            tail_cutoff_kt=config.tail_cutoff_kt,
            max_panels=config.max_panels,
            coverage_warning=config.coverage_warning,
            min_weight_coverage=config.min_weight_coverage,
        )

    @property
    def reduced_mass_factor(self) -> float:
        """a = A/(1+A), or 1 without a mass number."""
        if self.mass_number is None:
            return 1.0
        return self.mass_number / (1.0 + self.mass_number)

    def effective_temperature(self, temperature_keV: float) -> float:
        """theta = kT / a, the decay scale of the weight in lab energy."""
        return temperature_keV / self.reduced_mass_factor

    def integration_range(self, theta_keV: float) -> Tuple[float, float]:
        """
        Energy limits: the curve domain, truncated at the tail cutoff.

        The trapezoid rule keeps the whole domain so every sample is used.

        Raises
        ------
        InsufficientDataError
            If the domain starts at or beyond the tail cutoff.
        """
        lower, upper = self.curve.domain
        cutoff = self.tail_cutoff_kt * theta_keV
        if cutoff <= lower:
            raise InsufficientDataError(
                f"Curve domain [{lower:g}, {upper:g}] keV starts beyond the Maxwellian tail "
                f"cutoff {cutoff:g} keV (kT/a = {theta_keV:g} keV)"
            )
        if self.method != "trapezoid":
            upper = min(upper, cutoff)
        return lower, upper

    def panel_edges(self, lower: float, upper: float, theta_keV: float) -> np.ndarray:
        """
        Panel boundaries for the Gauss rule.

        Every sample energy is a boundary so each panel sees a linear
        cross section; data intervals wider than theta / panels_per_kt are
        split evenly.
        """
        breaks = np.concatenate(([lower], self.curve.breakpoints_within(lower, upper), [upper]))
        widths = np.diff(breaks)
        h_max = theta_keV / self.panels_per_kt

        counts = np.maximum(1, np.ceil(widths / h_max)).astype(np.int64)
        if counts.sum() > self.max_panels:
            budget = max(self.max_panels - widths.size, 0)
            if budget == 0:
                counts = np.ones_like(counts)
            else:
                # Spread the remaining budget in proportion to interval width
                extra = np.floor(widths / widths.sum() * budget).astype(np.int64)
                counts = 1 + extra

        steps = widths / counts
        _check_resolution(float(steps.max()), theta_keV)

        total = int(counts.sum())
        starts = np.repeat(breaks[:-1], counts)
        local = np.arange(total) - np.repeat(np.cumsum(counts) - counts, counts)
        left = starts + local * np.repeat(steps, counts)
        return np.append(left, breaks[-1])

    def _weighted(self, energies: np.ndarray, theta_keV: float) -> np.ndarray:
        return self.curve.evaluate(energies) * energies * np.exp(-energies / theta_keV)

    def numerator(self, theta_keV: float, lower: float, upper: float) -> Tuple[float, int]:
        """Int sigma(E) E exp(-E/theta) dE over [lower, upper] and node count."""
        if self.method == "trapezoid":
            nodes = np.concatenate(([lower], self.curve.breakpoints_within(lower, upper), [upper]))
            steps = np.diff(nodes)
            # Only steps starting below the tail cutoff carry weight
            weighted = nodes[:-1] < self.tail_cutoff_kt * theta_keV
            _check_resolution(float(steps[weighted].max()), theta_keV)
            return float(trapezoid(self._weighted(nodes, theta_keV), nodes)), int(nodes.size)

        edges = self.panel_edges(lower, upper, theta_keV)
        half = 0.5 * np.diff(edges)
        mid = 0.5 * (edges[:-1] + edges[1:])
        nodes = mid[:, None] + half[:, None] * self._xi[None, :]
        integrand = self._weighted(nodes, theta_keV)
        value = float(np.sum(half[:, None] * self._wi[None, :] * integrand))
        return value, int(nodes.size)

    def compute(self, temperature_keV: float) -> MACSResult:
        """
        MACS at one temperature.

        Raises
        ------
        InvalidInputError
            If the temperature is not a positive finite number.
        InsufficientDataError
            If the curve cannot support the integral.
        """
        kt = check_temperature(temperature_keV)
        theta = self.effective_temperature(kt)
        lower, upper = self.integration_range(theta)

        coverage = maxwellian_weight_fraction(lower, upper, theta)
        if coverage <= 0.0 or coverage < self.min_weight_coverage:
            raise InsufficientDataError(
                f"Curve domain [{lower:g}, {upper:g}] keV holds only {coverage:.4%} "
                f"of the Maxwellian weight at kT = {kt:g} keV"
            )
        if coverage < self.coverage_warning:
            logger.warning(
                "kT = %g keV: data range [%g, %g] keV covers %.4f%% of the Maxwellian "
                "weight; MACS is underestimated accordingly", kt, lower, upper, 100 * coverage
            )

        integral, n_nodes = self.numerator(theta, lower, upper)
        # Denominator Int_0^inf E exp(-E/theta) dE = theta^2
        macs = TWO_OVER_SQRT_PI * integral / theta ** 2

        logger.debug("kT = %g keV: MACS = %.6f mb (%d nodes, %s)", kt, macs, n_nodes, self.method)
        return MACSResult(
            temperature_keV=kt,
            macs_mb=macs,
            weight_coverage=coverage,
            n_nodes=n_nodes,
            method=self.method,
        )

    def macs(self, temperature_keV: float) -> float:
        """MACS in millibarn."""
        return self.compute(temperature_keV).macs_mb

    __call__ = compute


def compute_macs(
    curve: CrossSectionCurve,
    temperature_keV: float,
    mass_number: Optional[float] = None,
    **kwargs,
) -> float:
    """
    Convenience wrapper returning the MACS (mb) of a curve at kT.

    Extra keyword arguments go to :class:`MaxwellianIntegrator`.
    """
    return MaxwellianIntegrator(curve, mass_number=mass_number, **kwargs).macs(temperature_keV)
