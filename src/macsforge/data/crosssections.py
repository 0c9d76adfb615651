"""
Pointwise cross section curves.

Provides the sample container used by the MACS integrator:
- EnergyPoint: one (energy, cross section) sample in keV and millibarn
- CrossSectionCurve: sorted, deduplicated samples with linear interpolation
- CSV loaders for offline datasets

Duplicate energies keep the first-seen sample. Evaluation outside the
sampled domain raises OutOfRangeError rather than extrapolating.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, NamedTuple, Sequence, Tuple, Union

import numpy as np

from macsforge.core.errors import InvalidDataError, OutOfRangeError

logger = logging.getLogger(__name__)

# Unit conversions to keV and millibarn
ENERGY_UNITS = {"eV": 1e-3, "keV": 1.0, "MeV": 1e3}
XS_UNITS = {"b": 1e3, "barn": 1e3, "mb": 1.0, "mbarn": 1.0}


class EnergyPoint(NamedTuple):
    """Single cross section sample."""

    energy_keV: float
    cross_section_mb: float


@dataclass(frozen=True, eq=False)
class CrossSectionCurve:
    """
    Immutable linearly-interpolated cross section.

    Attributes
    ----------
    energies : np.ndarray
        Strictly increasing energies in keV
    values : np.ndarray
        Cross sections in millibarn
    label : str
        Free-form description (reaction, library)

    Examples
    --------
    >>> curve = CrossSectionCurve.from_points([(1.0, 100.0), (1000.0, 10.0)])
    >>> round(float(curve.evaluate(500.0)), 4)
    55.045
    """

    energies: np.ndarray
    values: np.ndarray
    label: str = ""
    n_duplicates: int = field(default=0, init=False, repr=False)

    def __post_init__(self):
        energies = np.asarray(self.energies, dtype=float).ravel()
        values = np.asarray(self.values, dtype=float).ravel()

        if energies.size == 0:
            raise InvalidDataError("Cross section curve needs at least one sample")
        if energies.shape != values.shape:
            raise InvalidDataError(
                f"Energy and cross section arrays differ in length "
                f"({energies.size} vs {values.size})"
            )
        if not (np.all(np.isfinite(energies)) and np.all(np.isfinite(values))):
            raise InvalidDataError("Cross section samples must be finite")
        if np.any(energies <= 0.0):
            raise InvalidDataError("Sample energies must be positive")
        if np.any(values < 0.0):
            bad = int(np.argmax(values < 0.0))
            raise InvalidDataError(
                f"Negative cross section {values[bad]:g} mb at {energies[bad]:g} keV"
            )

        # Stable sort keeps input order among equal energies; first one wins
        order = np.argsort(energies, kind="stable")
        energies = energies[order]
        values = values[order]
        keep = np.concatenate(([True], np.diff(energies) > 0.0))
        n_dup = int(energies.size - np.count_nonzero(keep))
        energies = energies[keep]
        values = values[keep]

        if energies.size < 2:
            raise InvalidDataError(
                f"Cross section curve needs at least 2 distinct energies, got {energies.size}"
            )
        if n_dup:
            logger.debug("Dropped %d duplicate energies (first-seen kept)", n_dup)

        energies.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "energies", energies)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "n_duplicates", n_dup)

    @classmethod
    def from_points(
        cls,
        points: Iterable[Union[EnergyPoint, Tuple[float, float]]],
        label: str = "",
    ) -> "CrossSectionCurve":
        """Build from (energy_keV, cross_section_mb) pairs."""
        pts = list(points)
        if not pts:
            raise InvalidDataError("Cross section curve needs at least one sample")
        try:
            data = np.asarray(pts, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidDataError(f"Samples must be numeric pairs: {exc}") from exc
        if data.ndim != 2 or data.shape[1] != 2:
            raise InvalidDataError("Samples must be (energy, cross section) pairs")
        return cls(energies=data[:, 0], values=data[:, 1], label=label)

    @classmethod
    def from_arrays(
        cls,
        energies: Sequence[float],
        values: Sequence[float],
        energy_units: str = "keV",
        xs_units: str = "mb",
        label: str = "",
    ) -> "CrossSectionCurve":
        """Build from parallel arrays, converting units to keV and mb."""
        e_scale, xs_scale = _unit_scales(energy_units, xs_units)
        return cls(
            energies=np.asarray(energies, dtype=float) * e_scale,
            values=np.asarray(values, dtype=float) * xs_scale,
            label=label,
        )

    @property
    def min_energy(self) -> float:
        return float(self.energies[0])

    @property
    def max_energy(self) -> float:
        return float(self.energies[-1])

    @property
    def domain(self) -> Tuple[float, float]:
        """Sampled energy range (keV)."""
        return self.min_energy, self.max_energy

    def __len__(self) -> int:
        return int(self.energies.size)

    def points(self) -> List[EnergyPoint]:
        return [EnergyPoint(float(e), float(s)) for e, s in zip(self.energies, self.values)]

    def contains(self, energy: Union[float, np.ndarray]) -> Union[bool, np.ndarray]:
        """True where energy lies inside the sampled domain."""
        e = np.asarray(energy, dtype=float)
        inside = (e >= self.energies[0]) & (e <= self.energies[-1])
        return bool(inside) if inside.ndim == 0 else inside

    def evaluate(self, energy: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Linearly interpolate the cross section.

        Parameters
        ----------
        energy : float or np.ndarray
            Energy in keV

        Returns
        -------
        float or np.ndarray
            Cross section in millibarn

        Raises
        ------
        OutOfRangeError
            If any energy lies outside [min_energy, max_energy].
        """
        e = np.asarray(energy, dtype=float)
        outside = ~((e >= self.energies[0]) & (e <= self.energies[-1]))
        if np.any(outside):
            first_bad = float(e[outside].flat[0]) if e.ndim else float(e)
            raise OutOfRangeError(first_bad, self.domain)

        result = np.interp(e, self.energies, self.values)
        if result.ndim == 0:
            return float(result)
        return result

    def __call__(self, energy: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return self.evaluate(energy)

    def breakpoints_within(self, lower: float, upper: float) -> np.ndarray:
        """Sample energies strictly inside (lower, upper)."""
        lo = np.searchsorted(self.energies, lower, side="right")
        hi = np.searchsorted(self.energies, upper, side="left")
        return self.energies[lo:hi]


def _unit_scales(energy_units: str, xs_units: str) -> Tuple[float, float]:
    try:
        e_scale = ENERGY_UNITS[energy_units]
    except KeyError:
        raise InvalidDataError(
            f"Unknown energy unit '{energy_units}', expected one of {', '.join(ENERGY_UNITS)}"
        ) from None
    try:
        xs_scale = XS_UNITS[xs_units]
    except KeyError:
        raise InvalidDataError(
            f"Unknown cross section unit '{xs_units}', expected one of {', '.join(XS_UNITS)}"
        ) from None
    return e_scale, xs_scale


def load_csv_curve(
    filepath: Union[str, Path],
    energy_col: int = 0,
    xs_col: int = 1,
    delimiter: str = ",",
    energy_units: str = "keV",
    xs_units: str = "mb",
    label: str = "",
) -> CrossSectionCurve:
    """
    Load a cross section curve from a delimited text file.

    Lines starting with '#' are comments; a non-numeric first row is treated
    as a header and skipped.

    Parameters
    ----------
    filepath : str or Path
        Path to the table
    energy_col, xs_col : int
        Column indices for energy and cross section
    delimiter : str
        Column delimiter
    energy_units : str
        'eV', 'keV' or 'MeV'
    xs_units : str
        'b'/'barn' or 'mb'/'mbarn'

    Returns
    -------
    CrossSectionCurve
    """
    path = Path(filepath)
    energies: List[float] = []
    values: List[float] = []
    try:
        with path.open(newline="") as fh:
            reader = csv.reader(fh, delimiter=delimiter)
            for lineno, row in enumerate(reader, start=1):
                if not row or not "".join(row).strip() or row[0].lstrip().startswith("#"):
                    continue
                try:
                    e = float(row[energy_col])
                    s = float(row[xs_col])
                except (ValueError, IndexError) as exc:
                    if not energies:
                        continue  # header
                    raise InvalidDataError(f"{path}:{lineno}: bad row {row!r}") from exc
                energies.append(e)
                values.append(s)
    except OSError as exc:
        raise InvalidDataError(f"Cannot read cross section table {path}: {exc}") from exc

    logger.info("Read %d samples from %s", len(energies), path)
    return CrossSectionCurve.from_arrays(
        energies, values, energy_units=energy_units, xs_units=xs_units,
        label=label or path.stem,
    )


def save_csv_curve(curve: CrossSectionCurve, filepath: Union[str, Path]) -> Path:
    """Write a curve as 'energy_keV,cross_section_mb' rows."""
    path = Path(filepath)
    with path.open("w", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["energy_keV", "cross_section_mb"])
        for e, s in zip(curve.energies, curve.values):
            writer.writerow([repr(float(e)), repr(float(s))])
    return path
