"""
Published MACS values for Mo-94(n,g) from JEFF-4.0.

These tests download the evaluation from the IAEA EXFOR service and are
skipped unless MACSFORGE_NETWORK_TESTS=1.
"""

import os

import pytest

from macsforge.core.config import MACSConfig
from macsforge.data.exfor import ExforClient
from macsforge.workflows.macs_pipeline import MACSPipeline

pytestmark = [
    pytest.mark.network,
    pytest.mark.skipif(
        os.environ.get("MACSFORGE_NETWORK_TESTS") != "1",
        reason="set MACSFORGE_NETWORK_TESTS=1 to query the EXFOR service",
    ),
]

REFERENCE_MB = {8.0: 195.468628, 90.0: 53.676243}


@pytest.fixture(scope="module")
def mo94_curve():
    with ExforClient() as client:
        return client.fetch_curve("Mo-94", "JEFF-4.0", "n,g")


def test_trapezoid_over_full_range(mo94_curve):
    """Trapezoid rule on the raw points over the whole evaluated range."""
    config = MACSConfig(temperatures_keV=tuple(REFERENCE_MB), method="trapezoid")
    report = MACSPipeline(config=config).run("Mo-94", "JEFF-4.0", "n,g", curve=mo94_curve)

    for result in report.results:
        assert result.macs_mb == pytest.approx(REFERENCE_MB[result.temperature_keV], abs=1e-3)


def test_gauss_close_to_reference(mo94_curve):
    config = MACSConfig(temperatures_keV=tuple(REFERENCE_MB))
    report = MACSPipeline(config=config).run("Mo-94", "JEFF-4.0", "n,g", curve=mo94_curve)

    for result in report.results:
        assert result.macs_mb == pytest.approx(REFERENCE_MB[result.temperature_keV], rel=1e-2)
