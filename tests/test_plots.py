"""Tests for chart generation, fallbacks and exports."""

import io
import zipfile
from unittest.mock import patch

import pytest

from config import Config
from services import DetailedPath, EngineQueryFailed, TopSolvent
from plots import (
    _plot_data_cache,
    _plot_figure_cache,
    create_bulk_download,
    export_figure_as_image,
    get_cached_data_keys,
    get_csv_with_metadata,
    plot_path_step_distribution,
    plot_solvent_usage,
    plot_top_solvents,
    safe_plot_execution,
)


class TestCharts:
    """Tests for the individual chart functions."""

    def test_sample_chart_cached(self):
        html = plot_solvent_usage()

        assert "plotly" in html.lower()
        assert "solvent_usage" in get_cached_data_keys()
        assert set(_plot_data_cache["solvent_usage"]["Source"]) == {"mock"}

    def test_live_chart(self):
        solvents = [TopSolvent(solvent="urn:s1", smiles="CCO", label="Ethanol", times_used=12)]
        with patch("plots.dashboard_plots.get_top_solvents", return_value=solvents):
            plot_top_solvents(limit=1)

        df = _plot_data_cache["top_solvents"]
        assert list(df["Solvent"]) == ["Ethanol"]
        assert list(df["Reactions"]) == [12]
        assert df["Source"].iloc[0] == "graphdb"

    def test_live_chart_falls_back_to_sample_data(self, mock_fallback):
        with patch("plots.dashboard_plots.get_top_solvents", side_effect=EngineQueryFailed("down")):
            plot_top_solvents(limit=3)

        assert len(_plot_data_cache["top_solvents"]) == 3
        assert _plot_data_cache["top_solvents"]["Source"].iloc[0] == "mock"
        assert "(sample data)" in _plot_figure_cache["top_solvents"].layout.title.text

    def test_failure_without_fallback_renders_error_chart(self, no_mock_fallback):
        with patch("plots.dashboard_plots.get_top_solvents", side_effect=EngineQueryFailed("down")):
            html = safe_plot_execution(plot_top_solvents)

        assert "Data Unavailable" in html
        assert "top_solvents" not in _plot_data_cache

    def test_step_distribution_fills_gaps(self):
        paths = [DetailedPath(["A"], "B", step_count=n) for n in (1, 3, 3)]

        plot_path_step_distribution(paths)

        df = _plot_data_cache["path_step_distribution"]
        assert list(df["Steps"]) == ["1", "2", "3"]
        assert list(df["Pathways"]) == [1, 0, 2]

    def test_step_distribution_requires_paths(self):
        with pytest.raises(ValueError):
            plot_path_step_distribution([])


class TestExports:
    """Tests for CSV, image and bulk exports."""

    def test_csv_with_metadata(self):
        plot_solvent_usage()

        csv_text = get_csv_with_metadata("solvent_usage")
        lines = csv_text.splitlines()

        assert lines[0] == "# ChemKG Explorer Export"
        assert "# Data Origin: mock" in lines
        assert f"# Data Source: {Config.repository_endpoint()}" in lines
        assert any(line.startswith("Solvent,") for line in lines)

    def test_csv_without_metadata(self):
        plot_solvent_usage()

        assert get_csv_with_metadata("solvent_usage", include_metadata=False).startswith("Solvent,")

    def test_missing_plot(self):
        assert get_csv_with_metadata("nope") is None
        assert export_figure_as_image("nope") is None

    def test_image_export(self):
        plot_solvent_usage()
        with patch("plots.shared.pio.to_image", return_value=b"PNG") as to_image:
            assert export_figure_as_image("solvent_usage", "png") == b"PNG"

        assert to_image.call_args[1]["format"] == "png"

    def test_image_export_failure(self):
        plot_solvent_usage()
        with patch("plots.shared.pio.to_image", side_effect=RuntimeError("no browser")):
            assert export_figure_as_image("solvent_usage", "svg") is None

    def test_bulk_download(self):
        plot_solvent_usage()

        archive = create_bulk_download(["solvent_usage", "catalyst_usage"], ["csv"])

        with zipfile.ZipFile(io.BytesIO(archive)) as zip_file:
            assert zip_file.namelist() == ["solvent_usage.csv"]

    def test_bulk_download_empty(self):
        assert create_bulk_download(["solvent_usage"], ["csv"]) is None
