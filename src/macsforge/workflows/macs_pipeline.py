"""MACS pipeline: dataset retrieval, curve construction and per-temperature integration.

Pipeline Stages:
1. Fetch the pointwise dataset (EXFOR web service) or read a local table
2. Build the interpolating cross section curve
3. Integrate the Maxwellian-weighted cross section at each temperature
4. Hand the ordered results to the report formatter

A failure at any temperature aborts the whole batch; no partial results
are returned.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from macsforge.core.config import MACSConfig, check_temperature
from macsforge.core.errors import InvalidInputError
from macsforge.data.crosssections import CrossSectionCurve, load_csv_curve, save_csv_curve
from macsforge.data.elements import Nucleus, parse_nucleus
from macsforge.data.exfor import CrossSectionDataset, ExforClient
from macsforge.physics.maxwellian import MACSResult, MaxwellianIntegrator

logger = logging.getLogger(__name__)


@dataclass
class MACSReport:
    """Results of one pipeline run.

    Attributes
    ----------
    target : str
        Target nucleus, e.g. 'Mo-94'
    library : str
        Evaluated library name
    reaction : str
        Reaction string, e.g. 'n,g'
    results : list of MACSResult
        One entry per requested temperature, in request order
    n_points : int
        Distinct samples in the curve
    domain_keV : tuple
        Sampled energy range
    mass_number : int, optional
        Mass number used for the reduced-mass conversion
    method : str
        Quadrature rule
    metadata : dict
        Dataset header fields
    curve : CrossSectionCurve, optional
        The integrated curve
    """

    target: str
    library: str
    reaction: str
    results: List[MACSResult]
    n_points: int = 0
    domain_keV: Tuple[float, float] = (0.0, 0.0)
    mass_number: Optional[int] = None
    method: str = "gauss"
    metadata: Dict[str, Any] = field(default_factory=dict)
    curve: Optional[CrossSectionCurve] = field(default=None, repr=False)

    @property
    def temperatures_keV(self) -> List[float]:
        return [r.temperature_keV for r in self.results]

    @property
    def macs_mb(self) -> List[float]:
        return [r.macs_mb for r in self.results]

    @property
    def title(self) -> str:
        return f"{self.library} {self.target}({self.reaction})"

    @property
    def reduced_mass_factor(self) -> float:
        if self.mass_number is None:
            return 1.0
        return self.mass_number / (1.0 + self.mass_number)


def compute_macs_table(
    integrator: MaxwellianIntegrator,
    temperatures_keV: Iterable[float],
    workers: int = 1,
) -> List[MACSResult]:
    """
    MACS at every temperature, in the order given.

    All temperatures are validated before any integration starts. The first
    failure propagates and discards the batch.

    Parameters
    ----------
    integrator : MaxwellianIntegrator
        Calculator bound to one curve
    temperatures_keV : iterable of float
        Temperatures kT in keV
    workers : int
        Threads to spread the temperatures over; results keep request order

    Returns
    -------
    list of MACSResult
    """
    temperatures = [check_temperature(t) for t in temperatures_keV]
    if not temperatures:
        raise InvalidInputError("At least one temperature is required")
    if workers < 1:
        raise InvalidInputError(f"workers must be >= 1, got {workers}")

    if workers == 1 or len(temperatures) == 1:
        return [integrator.compute(t) for t in temperatures]

    with ThreadPoolExecutor(max_workers=min(workers, len(temperatures))) as pool:
        return list(pool.map(integrator.compute, temperatures))


class MACSPipeline:
    """
    Orchestrates fetch -> curve -> integration for one target and reaction.

    Parameters
    ----------
    client : ExforClient, optional
        Data source; required unless a curve or input file is given to run()
    config : MACSConfig, optional
        Numerical and output settings
    """

    def __init__(self, client: Optional[ExforClient] = None, config: Optional[MACSConfig] = None):
        self.client = client
        self.config = (config or MACSConfig()).validate()

    def mass_number_for(self, nucleus: Nucleus) -> Optional[int]:
        return nucleus.mass_number if self.config.reduced_mass else None

    def load_dataset(self, target: str, library: str, reaction: str) -> CrossSectionDataset:
        if self.client is None:
            raise InvalidInputError("No data client configured; supply a local cross section table")
        return self.client.fetch_dataset(target, library, reaction)

    def run(
        self,
        target: str,
        library: str,
        reaction: str,
        curve: Optional[CrossSectionCurve] = None,
        input_path: Optional[Union[str, Path]] = None,
        energy_units: str = "keV",
        xs_units: str = "mb",
        save_data: Optional[Union[str, Path]] = None,
    ) -> MACSReport:
        """
        Compute the MACS table for a target, library and reaction.

        Parameters
        ----------
        target, library, reaction : str
            Dataset selection, e.g. 'Mo-94', 'JEFF-4.0', 'n,g'
        curve : CrossSectionCurve, optional
            Use this curve instead of fetching
        input_path : str or Path, optional
            Read the curve from a CSV table instead of fetching
        energy_units, xs_units : str
            Units of the CSV table
        save_data : str or Path, optional
            Write the loaded curve as CSV (keV, mb) before integrating

        Returns
        -------
        MACSReport
        """
        nucleus = parse_nucleus(target)
        metadata: Dict[str, Any] = {}

        if curve is None and input_path is not None:
            curve = load_csv_curve(input_path, energy_units=energy_units, xs_units=xs_units,
                                   label=f"{library} {nucleus}({reaction})")
            metadata["source"] = str(input_path)
        elif curve is None:
            dataset = self.load_dataset(nucleus.name, library, reaction)
            curve = dataset.to_curve()
            metadata.update(mat=dataset.mat, mt=dataset.mt, temperature_K=dataset.temperature_K,
                            interpolation=dataset.interpolation, source="EXFOR")

        if save_data is not None:
            save_csv_curve(curve, save_data)
            logger.info("Saved %d points to %s", len(curve), save_data)

        logger.info("%s %s(%s): %d points over [%g, %g] keV",
                    library, nucleus, reaction, len(curve), *curve.domain)
        if curve.n_duplicates:
            metadata["duplicates_dropped"] = curve.n_duplicates

        mass_number = self.mass_number_for(nucleus)
        integrator = MaxwellianIntegrator.from_config(curve, self.config, mass_number=mass_number)
        results = compute_macs_table(integrator, self.config.temperatures_keV,
                                     workers=self.config.workers)

        return MACSReport(
            target=nucleus.name,
            library=library,
            reaction=reaction,
            results=results,
            n_points=len(curve),
            domain_keV=curve.domain,
            mass_number=mass_number,
            method=self.config.method,
            metadata=metadata,
            curve=curve,
        )
