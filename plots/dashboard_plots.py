"""ChemKG Explorer - Dashboard and Analytics Charts.

Chart functions behind the dashboard and analytics pages. Each returns an HTML
fragment and stores its DataFrame and figure in the export caches under the
chart's name.

Live Charts (GraphDB, with sample-data fallback):
    - plot_top_solvents(): solvents used in the most reactions
    - plot_popular_compounds(): compounds involved in the most reactions

Analytics Charts (bundled sample data):
    - plot_solvent_usage(): solvent usage share
    - plot_catalyst_usage(): catalyst usage share
    - plot_yield_distribution(): reactions per yield band
    - plot_common_intermediates(): compounds most often found mid-pathway

Pathway Charts:
    - plot_path_step_distribution(): pathway count per chain length

When GraphDB fails and Config.ENABLE_MOCK_FALLBACK is on, live charts are drawn
from sample data and titled accordingly; otherwise EngineQueryFailed propagates
and safe_plot_execution() turns it into a fallback chart.
"""

import logging
from typing import List

import pandas as pd

from config import Config
from services import EngineQueryFailed, DetailedPath, get_top_solvents, get_popular_compounds
from services.mock_data import (
    MOCK_CATALYST_USAGE,
    MOCK_INTERMEDIATES,
    MOCK_SOLVENT_USAGE,
    MOCK_YIELD_DISTRIBUTION,
    mock_popular_compounds,
    mock_top_solvents,
)
from .shared import bar_chart_html

logger = logging.getLogger(__name__)


def _display_name(row: dict) -> str:
    return row.get("label") or row.get("smiles") or row.get("solvent") or row.get("compound") or "unknown"


def _live_or_mock(fetch, mock, title: str):
    try:
        return [item.to_dict() for item in fetch()], "graphdb", title
    except EngineQueryFailed as e:
        if not Config.ENABLE_MOCK_FALLBACK:
            raise
        logger.warning(f"{title}: GraphDB unavailable, using sample data ({e.message})")
        return mock(), "mock", f"{title} (sample data)"


def plot_top_solvents(limit: int = 10) -> str:
    """Horizontal bar chart of the solvents used in the most reactions."""
    rows, source, title = _live_or_mock(lambda: get_top_solvents(limit),
                                        lambda: mock_top_solvents()[:limit], "Top Solvents")
    df = pd.DataFrame({
        "Solvent": [_display_name(r) for r in rows],
        "SMILES": [r.get("smiles") for r in rows],
        "Reactions": [r["times_used"] for r in rows],
        "Source": source,
    })
    return bar_chart_html(df, "Solvent", "Reactions", title, "top_solvents",
                          horizontal=True, hover_data=["SMILES"])


def plot_popular_compounds(limit: int = 15) -> str:
    """Horizontal bar chart of compounds by number of reactions involved."""
    rows, source, title = _live_or_mock(lambda: get_popular_compounds(limit),
                                        lambda: mock_popular_compounds()[:limit], "Popular Compounds")
    df = pd.DataFrame({
        "Compound": [_display_name(r) for r in rows],
        "SMILES": [r.get("smiles") for r in rows],
        "Reactions": [r["reactions_involved"] for r in rows],
        "Source": source,
    })
    return bar_chart_html(df, "Compound", "Reactions", title, "popular_compounds",
                          horizontal=True, hover_data=["SMILES"])


def plot_solvent_usage() -> str:
    df = pd.DataFrame(MOCK_SOLVENT_USAGE).rename(
        columns={"name": "Solvent", "count": "Reactions", "percentage": "Percentage"})
    df["Source"] = "mock"
    return bar_chart_html(df, "Solvent", "Percentage", "Solvent Usage (% of reactions)",
                          "solvent_usage", hover_data=["Reactions"])


def plot_catalyst_usage() -> str:
    df = pd.DataFrame(MOCK_CATALYST_USAGE).rename(
        columns={"name": "Catalyst", "count": "Reactions", "percentage": "Percentage"})
    df["Source"] = "mock"
    return bar_chart_html(df, "Catalyst", "Percentage", "Catalyst Usage (% of catalysed reactions)",
                          "catalyst_usage", hover_data=["Reactions"])


def plot_yield_distribution() -> str:
    df = pd.DataFrame(MOCK_YIELD_DISTRIBUTION).rename(
        columns={"range": "Yield", "count": "Reactions", "percentage": "Percentage"})
    df["Source"] = "mock"
    return bar_chart_html(df, "Yield", "Reactions", "Reaction Yield Distribution",
                          "yield_distribution", hover_data=["Percentage"])


def plot_common_intermediates() -> str:
    df = pd.DataFrame(MOCK_INTERMEDIATES).rename(
        columns={"label": "Compound", "smiles": "SMILES", "reaction_count": "Reactions"})
    df["Source"] = "mock"
    return bar_chart_html(df, "Compound", "Reactions", "Common Pathway Intermediates",
                          "common_intermediates", horizontal=True, hover_data=["SMILES"])


def plot_path_step_distribution(paths: List[DetailedPath]) -> str:
    """Bar chart of how many pathways were found for each chain length.

    Every length from 1 to the longest found is shown, including empty ones.
    """
    if not paths:
        raise ValueError("No pathways to plot")

    counts = pd.Series([p.step_count for p in paths]).value_counts()
    steps = range(1, max(counts.index) + 1)
    df = pd.DataFrame({
        "Steps": [str(s) for s in steps],
        "Pathways": [int(counts.get(s, 0)) for s in steps],
        "Source": "graphdb",
    })
    return bar_chart_html(df, "Steps", "Pathways", "Pathways by Number of Steps", "path_step_distribution")


PLOT_FUNCTIONS = {
    'top_solvents': plot_top_solvents,
    'popular_compounds': plot_popular_compounds,
    'solvent_usage': plot_solvent_usage,
    'catalyst_usage': plot_catalyst_usage,
    'yield_distribution': plot_yield_distribution,
    'common_intermediates': plot_common_intermediates,
}
