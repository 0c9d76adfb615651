"""Run configuration for MACS calculations."""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from macsforge.core.errors import InvalidInputError

DEFAULT_TEMPERATURES_KEV: Tuple[float, ...] = (8.0, 25.0, 30.0, 90.0)

EXFOR_BASE_URL = "https://www-nds.iaea.org/exfor/"

QUADRATURE_METHODS = ("gauss", "trapezoid")


@dataclass(frozen=True)
class MACSConfig:
    """Configuration for a MACS run.

    Attributes
    ----------
    temperatures_keV : tuple of float
        Maxwellian temperatures kT in keV, reported in this order
    method : str
        Quadrature rule: 'gauss' (composite Gauss-Legendre on the
        interpolated curve) or 'trapezoid' (raw samples only)
    panels_per_kt : int
        Panels per effective temperature; sets the widest panel
    gauss_order : int
        Gauss-Legendre nodes per panel
    tail_cutoff_kt : float
        Upper integration limit in units of the effective temperature
    max_panels : int
        Hard cap on the panel count
    coverage_warning : float
        Log a warning when the integrated range holds less Maxwellian
        weight than this fraction
    min_weight_coverage : float
        Fail with InsufficientDataError below this fraction
    reduced_mass : bool
        Convert lab-frame energies with a = A/(1+A) of the target
    decimals : int
        Decimal places for MACS in reports
    workers : int
        Threads used to evaluate temperatures (1 = sequential)
    base_url : str
        EXFOR web service root
    timeout_s : float
        Network timeout in seconds
    """

    temperatures_keV: Tuple[float, ...] = DEFAULT_TEMPERATURES_KEV
    method: str = "gauss"
    panels_per_kt: int = 16
    gauss_order: int = 4
    tail_cutoff_kt: float = 50.0
    max_panels: int = 2_000_000
    coverage_warning: float = 0.999
    min_weight_coverage: float = 0.5
    reduced_mass: bool = True
    decimals: int = 6
    workers: int = 1
    base_url: str = EXFOR_BASE_URL
    timeout_s: float = 60.0
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def validate(self) -> "MACSConfig":
        """Check field ranges, returning self for chaining."""
        if not self.temperatures_keV:
            raise InvalidInputError("At least one temperature is required")
        for t in self.temperatures_keV:
            check_temperature(t)
        if self.method not in QUADRATURE_METHODS:
            raise InvalidInputError(
                f"Unknown quadrature method '{self.method}', "
                f"expected one of {', '.join(QUADRATURE_METHODS)}"
            )
        if self.panels_per_kt < 1:
            raise InvalidInputError("panels_per_kt must be >= 1")
        if self.gauss_order < 1:
            raise InvalidInputError("gauss_order must be >= 1")
        if not self.tail_cutoff_kt > 0:
            raise InvalidInputError("tail_cutoff_kt must be positive")
        if self.max_panels < 1:
            raise InvalidInputError("max_panels must be >= 1")
        if not 0.0 <= self.min_weight_coverage <= 1.0:
            raise InvalidInputError("min_weight_coverage must lie in [0, 1]")
        if self.decimals < 0:
            raise InvalidInputError("decimals must be >= 0")
        if self.workers < 1:
            raise InvalidInputError("workers must be >= 1")
        if not self.timeout_s > 0:
            raise InvalidInputError("timeout_s must be positive")
        return self

    def with_overrides(self, **overrides: Any) -> "MACSConfig":
        """Copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "temperatures_keV" in changes:
            changes["temperatures_keV"] = tuple(float(t) for t in changes["temperatures_keV"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("extra")
        data["temperatures_keV"] = list(self.temperatures_keV)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MACSConfig":
        """Build from a mapping; unknown keys are kept in ``extra``."""
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        if "temperatures_keV" in kwargs:
            kwargs["temperatures_keV"] = tuple(float(t) for t in kwargs["temperatures_keV"])
        return cls(extra=extra, **kwargs)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "MACSConfig":
        """Load a configuration from a JSON file."""
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidInputError(f"Cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidInputError(f"Config {path} must hold a JSON object")
        return cls.from_dict(data)


def check_temperature(temperature_keV: float) -> float:
    """Return the temperature as float or raise InvalidInputError."""
    try:
        t = float(temperature_keV)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Temperature must be a number, got {temperature_keV!r}") from exc
    if not math.isfinite(t) or t <= 0.0:
        raise InvalidInputError(f"Temperature must be positive and finite, got {temperature_keV!r}")
    return t


def parse_temperatures(text: str) -> Tuple[float, ...]:
    """Parse a comma-separated list of temperatures in keV.

    >>> parse_temperatures("8, 25,30")
    (8.0, 25.0, 30.0)
    """
    items = [item.strip() for item in text.split(",")]
    if not any(items):
        raise InvalidInputError("Empty temperature list")
    temperatures = []
    for item in items:
        if not item:
            raise InvalidInputError(f"Malformed temperature list: {text!r}")
        temperatures.append(check_temperature(item))
    return tuple(temperatures)
