"""
Error taxonomy for MACS calculations.

All errors raised by the package derive from :class:`MACSError` so callers
can catch the whole family at once. The value-type errors also subclass
``ValueError`` and the fetch error subclasses ``RuntimeError``.
"""

from __future__ import annotations


class MACSError(Exception):
    """Base class for all MACSForge errors."""


class InvalidInputError(MACSError, ValueError):
    """Bad caller input: temperature, nucleus identifier, CLI argument."""


class InvalidDataError(MACSError, ValueError):
    """Cross-section samples that cannot form a curve."""


class InsufficientDataError(InvalidDataError):
    """A curve that cannot support the Maxwellian integral."""


class OutOfRangeError(MACSError, ValueError):
    """Curve evaluated outside its sampled energy domain."""

    def __init__(self, energy: float, domain: tuple):
        self.energy = energy
        self.domain = domain
        super().__init__(
            f"Energy {energy:g} keV outside curve domain "
            f"[{domain[0]:g}, {domain[1]:g}] keV"
        )


class FetchError(MACSError, RuntimeError):
    """Network, HTTP or payload failure while retrieving a dataset."""


class AccuracyWarning(UserWarning):
    """Quadrature resolution coarser than the Maxwellian weight's scale."""
