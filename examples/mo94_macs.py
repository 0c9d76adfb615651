#!/usr/bin/env python3
"""
Mo-94(n,g) MACS from JEFF-4.0.

Downloads the evaluation from the IAEA EXFOR service, prints the MACS table
at the usual s-process temperatures and compares the two quadrature rules.

Usage:
    python examples/mo94_macs.py
"""

import logging

from macsforge.core import MACSConfig
from macsforge.data import ExforClient
from macsforge.physics import MaxwellianIntegrator
from macsforge.reporting import MACSTable
from macsforge.workflows import MACSPipeline


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    config = MACSConfig(temperatures_keV=(5.0, 8.0, 25.0, 30.0, 90.0))
    with ExforClient() as client:
        report = MACSPipeline(client=client, config=config).run("Mo-94", "JEFF-4.0", "n,g")

    print(MACSTable.from_report(report).to_text("table"))
    print()

    trapezoid = MaxwellianIntegrator.from_config(
        report.curve, config.with_overrides(method="trapezoid"), mass_number=report.mass_number
    )
    print(f"{'kT':>6}  {'gauss':>12}  {'trapezoid':>12}  {'rel. diff':>10}")
    for result in report.results:
        other = trapezoid.macs(result.temperature_keV)
        diff = (other - result.macs_mb) / result.macs_mb
        print(f"{result.temperature_keV:6.1f}  {result.macs_mb:12.6f}  {other:12.6f}  {diff:10.2e}")


if __name__ == "__main__":
    main()
