"""Tests for the macsforge command line."""

import json

import pytest

from macsforge.cli import app
from macsforge.data.crosssections import load_csv_curve
from macsforge.data.exfor import ExforClient


@pytest.fixture
def flat_table(tmp_path):
    path = tmp_path / "flat.csv"
    path.write_text("# constant 100 mb\nenergy_keV,xs_mb\n1e-6,100\n10000,100\n")
    return path


@pytest.fixture
def offline_client(monkeypatch, fake_opener):
    """Route every ExforClient the CLI creates to the fake opener."""
    monkeypatch.setattr(app, "ExforClient",
                        lambda **kwargs: ExforClient(opener=fake_opener, **kwargs))
    return fake_opener


class TestCompute:
    """The compute subcommand."""

    def test_input_table(self, flat_table, capsys):
        code = app.main(["compute", "Mo-94", "--input", str(flat_table), "-t", "8,30",
                         "--no-reduced-mass"])
        out = capsys.readouterr().out.splitlines()

        assert code == 0
        assert out[0] == "=== MACS Calculation for JEFF-4.0 Mo-94(n,g) ==="
        assert out[2].split() == ["T(keV)", "MACS(mb)"]
        assert out[4].split() == ["8.0", "112.837917"]
        assert out[5].split() == ["30.0", "112.837917"]

    def test_json_output_file(self, flat_table, tmp_path, capsys):
        output = tmp_path / "macs.json"
        code = app.main(["compute", "mo94", "--input", str(flat_table), "-t", "30",
                         "-f", "json", "-o", str(output)])

        assert code == 0
        assert "Wrote MACS table" in capsys.readouterr().err
        data = json.loads(output.read_text())
        assert data["target"] == "Mo-94"
        assert data["metadata"]["mass_number"] == 94

    def test_units_option(self, tmp_path, capsys):
        path = tmp_path / "ev_barn.csv"
        path.write_text("1,0.1\n1e7,0.1\n")
        code = app.main(["compute", "Mo-94", "--input", str(path), "-t", "30",
                         "--energy-units", "eV", "--xs-units", "b", "-f", "csv"])
        lines = capsys.readouterr().out.splitlines()

        assert code == 0
        assert lines[1].startswith("30,112.837")

    def test_bad_temperature_exits(self, flat_table, capsys):
        with pytest.raises(SystemExit) as excinfo:
            app.main(["compute", "Mo-94", "--input", str(flat_table), "-t", "0"])
        assert excinfo.value.code == 2

    def test_missing_input_returns_error(self, tmp_path, capsys):
        code = app.main(["compute", "Mo-94", "--input", str(tmp_path / "nope.csv")])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_target_returns_error(self, flat_table, capsys):
        code = app.main(["compute", "Qq-12", "--input", str(flat_table)])

        assert code == 1
        assert "Unknown element" in capsys.readouterr().err

    def test_download(self, offline_client, tmp_path, capsys):
        saved = tmp_path / "points.csv"
        code = app.main(["compute", "Mo-94", "-l", "JEFF-4.0", "-t", "30",
                         "--save-data", str(saved), "--timeout", "5"])
        captured = capsys.readouterr()

        assert code == 0
        assert "Downloading JEFF-4.0 data for Mo-94(n,g)" in captured.err
        assert "MACS Calculation for JEFF-4.0 Mo-94(n,g)" in captured.out
        assert offline_client.timeouts == [5.0, 5.0]
        assert len(load_csv_curve(saved)) == 2001

    def test_download_json_keeps_dataset_metadata(self, offline_client, capsys):
        code = app.main(["compute", "Mo-94", "-t", "30", "-f", "json"])
        payload = json.loads(capsys.readouterr().out)

        assert code == 0
        assert payload["metadata"]["source"] == "EXFOR"
        assert payload["metadata"]["interpolation"] == "lin-lin"
        assert payload["metadata"]["mat"] == 4234

    def test_download_unknown_library(self, offline_client, capsys):
        code = app.main(["compute", "Mo-94", "-l", "JENDL-5"])

        assert code == 1
        assert "available: ENDF-B-VIII.1, JEFF-4.0" in capsys.readouterr().err

    def test_config_file(self, flat_table, tmp_path, capsys):
        config = tmp_path / "macs.json"
        config.write_text(json.dumps({"temperatures_keV": [5, 50], "decimals": 2}))
        code = app.main(["compute", "Mo-94", "--input", str(flat_table),
                         "--config", str(config)])
        out = capsys.readouterr().out.splitlines()

        assert code == 0
        assert out[4].split() == ["5.0", "112.84"]
        assert out[5].split() == ["50.0", "112.84"]


class TestLibraries:
    """The libraries subcommand."""

    def test_lists_names(self, offline_client, capsys):
        code = app.main(["libraries", "Mo-94"])

        assert code == 0
        assert capsys.readouterr().out.split() == ["ENDF-B-VIII.1", "JEFF-4.0"]

    def test_no_data(self, monkeypatch, capsys):
        from conftest import FakeOpener

        opener = FakeOpener({"e4list": {"sections": []}})
        monkeypatch.setattr(app, "ExforClient",
                            lambda **kwargs: ExforClient(opener=opener, **kwargs))

        assert app.main(["libraries", "Au-197"]) == 0
        assert "No evaluated data for Au-197(n,g)" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        app.main(["--version"])
    assert excinfo.value.code == 0
    assert "macsforge" in capsys.readouterr().out
