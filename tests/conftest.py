"""Shared fixtures: synthetic EXFOR replies served by a fake urllib opener."""

import io
import json

import numpy as np
import pytest


def make_section(library, sect_id, pen_sect_id, target="Mo-94"):
    return {
        "Targ": target, "ZT": 42, "AT": 94, "NSUB": 10, "MT": 102, "MF": 3,
        "R": "n,g", "RC": "", "EvalID": 1, "SectID": sect_id,
        "PenSectID": pen_sect_id, "LibID": sect_id, "LibName": library,
        "DATE": "2024", "AUTH": "Test",
    }


def make_dataset(energies_eV, sigmas_b, library="JEFF-4.0", target="Mo-94"):
    return {
        "id": "1", "FILE": "n_Mo094.dat", "dataType": "ENDF", "LIBRARY": library,
        "TARGET": target, "TEMP": 293.6, "NSUB": 10, "MAT": 4234, "MF": 3,
        "MT": 102, "REACTION": "n,g", "COLUMNS": ["E", "Sig"],
        "defaultInterpolation": "lin-lin", "nPts": len(energies_eV),
        "pts": [{"E": float(e), "Sig": float(s)} for e, s in zip(energies_eV, sigmas_b)],
    }


class FakeResponse(io.BytesIO):
    """BytesIO already supports the context manager protocol."""


class FakeOpener:
    """
    Stand-in for urllib's OpenerDirector.

    Routes requests by endpoint name and records every URL opened.
    """

    def __init__(self, routes):
        self.routes = routes
        self.urls = []
        self.timeouts = []
        self.closed = False

    def open(self, request, timeout=None):
        url = request.full_url
        self.urls.append(url)
        self.timeouts.append(timeout)
        for key, reply in self.routes.items():
            if key in url:
                if isinstance(reply, Exception):
                    raise reply
                if isinstance(reply, bytes):
                    return FakeResponse(reply)
                return FakeResponse(json.dumps(reply).encode())
        raise AssertionError(f"Unexpected URL {url}")

    def close(self):
        self.closed = True


@pytest.fixture
def one_over_v_points():
    """1/v capture cross section, 1000 mb at 1 keV, 1 meV..10 MeV grid (eV, barn)."""
    energies_eV = np.logspace(-3, 7, 2001)
    sigmas_b = 1.0 / np.sqrt(energies_eV / 1e3)
    return energies_eV, sigmas_b


@pytest.fixture
def exfor_routes(one_over_v_points):
    energies_eV, sigmas_b = one_over_v_points
    return {
        "e4list": {
            "format": "json", "now": "2026-01-01", "program": "e4list", "req": 1,
            "sections": [
                make_section("ENDF-B-VIII.1", 11, 111),
                make_section("JEFF-4.0", 22, 222),
                make_section("JEFF-4.0", 33, 333),
            ],
        },
        "e4sig": {
            "format": "json", "now": "2026-01-01", "program": "e4sig",
            "datasets": [make_dataset(energies_eV, sigmas_b)],
        },
    }


@pytest.fixture
def fake_opener(exfor_routes):
    return FakeOpener(exfor_routes)
