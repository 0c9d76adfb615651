"""
Tests for EXFOR web service access.

All requests go to a fake opener; no network access is needed.
"""

import pytest
from urllib.error import HTTPError, URLError

from macsforge.core.errors import FetchError
from macsforge.data.crosssections import CrossSectionCurve
from macsforge.data.exfor import CrossSectionDataset, ExforClient, Section

from conftest import FakeOpener, make_dataset, make_section


class TestSection:
    """Parsing of e4list section entries."""

    def test_from_json(self):
        section = Section.from_json(make_section("JEFF-3.1", 5, 55))

        assert section.library == "JEFF-3.1"
        assert section.sect_id == 5
        assert section.pen_sect_id == 55
        assert section.mt == 102

    def test_missing_ids(self):
        raw = make_section("JEFF-3.1", 5, 55)
        del raw["SectID"]

        with pytest.raises(FetchError, match="Malformed section"):
            Section.from_json(raw)


class TestCrossSectionDataset:
    """Parsing of e4sig datasets."""

    def test_unit_conversion(self):
        dataset = CrossSectionDataset.from_json(make_dataset([1e3, 2e3], [0.5, 0.25]))

        assert dataset.points[0].energy_keV == pytest.approx(1.0)
        assert dataset.points[0].cross_section_mb == pytest.approx(500.0)
        assert dataset.points[1].energy_keV == pytest.approx(2.0)
        assert dataset.points[1].cross_section_mb == pytest.approx(250.0)

    def test_header_fields(self):
        dataset = CrossSectionDataset.from_json(make_dataset([1e3, 2e3], [0.5, 0.25]))

        assert dataset.library == "JEFF-4.0"
        assert dataset.target == "Mo-94"
        assert dataset.mat == 4234
        assert dataset.mt == 102
        assert dataset.temperature_K == pytest.approx(293.6)
        assert dataset.interpolation == "lin-lin"
        assert dataset.metadata["FILE"] == "n_Mo094.dat"
        assert "pts" not in dataset.metadata

    def test_to_curve(self):
        dataset = CrossSectionDataset.from_json(make_dataset([2e3, 1e3], [0.25, 0.5]))
        curve = dataset.to_curve()

        assert isinstance(curve, CrossSectionCurve)
        assert curve.domain == pytest.approx((1.0, 2.0))
        assert curve.label == "JEFF-4.0 Mo-94(n,g)"

    def test_malformed_point(self):
        raw = make_dataset([1e3], [0.5])
        raw["pts"][0] = {"E": 1e3}

        with pytest.raises(FetchError):
            CrossSectionDataset.from_json(raw)


class TestExforClient:
    """Request flow against the fake opener."""

    def test_list_sections_url(self, fake_opener):
        client = ExforClient(opener=fake_opener, timeout_s=12.0)
        sections = client.list_sections("Mo-94", "n,g")

        assert len(sections) == 3
        url = fake_opener.urls[0]
        assert url.startswith("https://www-nds.iaea.org/exfor/e4list?")
        assert "Target=Mo-94" in url
        assert "Reaction=n,g" in url
        assert "Quantity=SIG" in url
        assert url.endswith("&json")
        assert fake_opener.timeouts == [12.0]

    def test_list_libraries_unique_in_order(self, fake_opener):
        client = ExforClient(opener=fake_opener)
        assert client.list_libraries("Mo-94", "n,g") == ["ENDF-B-VIII.1", "JEFF-4.0"]

    def test_fetch_uses_first_matching_section(self, fake_opener):
        client = ExforClient(opener=fake_opener)
        dataset = client.fetch_dataset("Mo-94", "JEFF-4.0", "n,g")

        assert len(fake_opener.urls) == 2
        assert "e4sig?SectID=22&PenSectID=222&json" in fake_opener.urls[1]
        assert len(dataset.points) == 2001

    def test_fetch_points_in_kev_mb(self, fake_opener):
        points = ExforClient(opener=fake_opener).fetch_points("Mo-94", "JEFF-4.0", "n,g")

        # 1/v data: 1 barn at 1 keV
        energies = [p.energy_keV for p in points]
        index = min(range(len(energies)), key=lambda i: abs(energies[i] - 1.0))
        assert energies[index] == pytest.approx(1.0)
        assert points[index].cross_section_mb == pytest.approx(1000.0)

    def test_fetch_curve(self, fake_opener):
        curve = ExforClient(opener=fake_opener).fetch_curve("Mo-94", "JEFF-4.0", "n,g")
        assert curve.domain == pytest.approx((1e-6, 1e4))

    def test_unknown_library(self, fake_opener):
        client = ExforClient(opener=fake_opener)

        with pytest.raises(FetchError, match="available: ENDF-B-VIII.1, JEFF-4.0"):
            client.fetch_dataset("Mo-94", "JENDL-5", "n,g")

    def test_no_sections(self):
        opener = FakeOpener({"e4list": {"sections": []}})

        with pytest.raises(FetchError, match="No JEFF-4.0 data"):
            ExforClient(opener=opener).fetch_dataset("Mo-94", "JEFF-4.0", "n,g")

    def test_empty_dataset(self, exfor_routes):
        exfor_routes["e4sig"]["datasets"] = [make_dataset([], [])]
        client = ExforClient(opener=FakeOpener(exfor_routes))

        with pytest.raises(FetchError, match="Empty dataset"):
            client.fetch_dataset("Mo-94", "JEFF-4.0", "n,g")

    def test_no_datasets(self, exfor_routes):
        exfor_routes["e4sig"] = {"datasets": []}
        client = ExforClient(opener=FakeOpener(exfor_routes))

        with pytest.raises(FetchError, match="No dataset"):
            client.fetch_dataset("Mo-94", "JEFF-4.0", "n,g")

    def test_http_error(self):
        error = HTTPError("https://www-nds.iaea.org/exfor/e4list", 503, "Service Unavailable", None, None)
        client = ExforClient(opener=FakeOpener({"e4list": error}))

        with pytest.raises(FetchError, match="HTTP 503"):
            client.list_sections("Mo-94", "n,g")

    def test_network_error(self):
        client = ExforClient(opener=FakeOpener({"e4list": URLError("no route to host")}))

        with pytest.raises(FetchError, match="Cannot reach"):
            client.list_sections("Mo-94", "n,g")

    def test_invalid_json(self):
        client = ExforClient(opener=FakeOpener({"e4list": b"<html>maintenance</html>"}))

        with pytest.raises(FetchError, match="Invalid JSON"):
            client.list_sections("Mo-94", "n,g")

    def test_fetch_error_is_runtime_error(self):
        client = ExforClient(opener=FakeOpener({"e4list": URLError("down")}))

        with pytest.raises(RuntimeError):
            client.list_sections("Mo-94", "n,g")

    def test_base_url_normalised(self, fake_opener):
        client = ExforClient(base_url="http://mirror.example/exfor", opener=fake_opener)
        client.list_sections("Mo-94", "n,g")

        assert fake_opener.urls[0].startswith("http://mirror.example/exfor/e4list?")


class TestClientLifecycle:
    """Explicit open/close of the client."""

    def test_context_manager_closes(self, fake_opener):
        with ExforClient(opener=fake_opener) as client:
            client.list_sections("Mo-94", "n,g")

        with pytest.raises(FetchError, match="closed"):
            client.list_sections("Mo-94", "n,g")

    def test_injected_opener_left_open(self, fake_opener):
        with ExforClient(opener=fake_opener):
            pass
        assert not fake_opener.closed

    def test_own_opener_closed(self, monkeypatch):
        created = []

        def fake_build_opener():
            opener = FakeOpener({})
            created.append(opener)
            return opener

        monkeypatch.setattr("macsforge.data.exfor.build_opener", fake_build_opener)
        client = ExforClient()
        client.close()
        client.close()

        assert created[0].closed
