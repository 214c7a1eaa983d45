"""ChemKG Explorer - Plot Functions Module.

Chart functions for the dashboard and analytics pages, plus the shared styling,
fallback and export helpers they rely on.

Module Structure:
    - shared: styling constants, fallback charts, export caches and helpers
    - dashboard_plots: dashboard, analytics and pathway charts

Available Plot Functions:
    Dashboard:
        - plot_top_solvents(): solvents used in the most reactions
        - plot_popular_compounds(): compounds involved in the most reactions

    Analytics:
        - plot_solvent_usage(): solvent usage share
        - plot_catalyst_usage(): catalyst usage share
        - plot_yield_distribution(): reactions per yield band
        - plot_common_intermediates(): compounds most often found mid-pathway

    Pathways:
        - plot_path_step_distribution(): pathway count per chain length

Usage Examples:
    >>> from plots import safe_plot_execution, plot_top_solvents
    >>> html = safe_plot_execution(plot_top_solvents)

    >>> from plots import _plot_data_cache
    >>> if 'top_solvents' in _plot_data_cache:
    ...     df = _plot_data_cache['top_solvents']
"""

from .shared import (
    # Utility functions
    bar_chart_html,
    safe_plot_execution,
    create_fallback_plot,
    export_figure_as_image,
    get_csv_with_metadata,
    create_bulk_download,

    # Constants and configuration
    BRAND_COLORS,
    config,
    _plot_data_cache,
    _plot_figure_cache,
)

from .dashboard_plots import (
    plot_top_solvents,
    plot_popular_compounds,
    plot_solvent_usage,
    plot_catalyst_usage,
    plot_yield_distribution,
    plot_common_intermediates,
    plot_path_step_distribution,
    PLOT_FUNCTIONS,
)

__version__ = "1.0.0"

__all__ = [
    # Shared utilities
    'bar_chart_html',
    'safe_plot_execution',
    'create_fallback_plot',
    'export_figure_as_image',
    'get_csv_with_metadata',
    'create_bulk_download',
    'BRAND_COLORS',
    'config',
    '_plot_data_cache',
    '_plot_figure_cache',

    # Chart functions
    'plot_top_solvents',
    'plot_popular_compounds',
    'plot_solvent_usage',
    'plot_catalyst_usage',
    'plot_yield_distribution',
    'plot_common_intermediates',
    'plot_path_step_distribution',
    'PLOT_FUNCTIONS',
]


def get_cached_data_keys():
    """Return the names of all plots with data available for CSV export."""
    return list(_plot_data_cache.keys())


def clear_plot_cache():
    """Clear the data and figure caches, forcing charts to be regenerated."""
    _plot_data_cache.clear()
    _plot_figure_cache.clear()
