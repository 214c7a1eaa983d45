"""ChemKG Explorer - Shared Plot Utilities and Constants.

This module contains the shared utilities, constants and helper functions used by
the ChemKG dashboard charts. It provides a single place for styling, error
fallbacks and the export caches so every chart behaves the same way.

Core Components:
    - Brand color palette and Plotly configuration
    - bar_chart_html(): the horizontal/vertical bar chart used across the dashboard
    - create_fallback_plot(): visible error chart when data is unavailable
    - safe_plot_execution(): error-safe wrapper with timing
    - Global caches (_plot_data_cache, _plot_figure_cache) for CSV and image export

Export Features:
    - get_csv_with_metadata(): CSV with a commented provenance header
    - export_figure_as_image(): PNG/SVG export through Kaleido
    - create_bulk_download(): ZIP archive of several plots and formats

Usage Examples:
    >>> result = safe_plot_execution(plot_top_solvents)
    >>> csv_text = get_csv_with_metadata('top_solvents')
"""

import io
import logging
import time
import zipfile
from datetime import datetime
from typing import Any, List, Optional

import pandas as pd
import plotly.express as px
import plotly.io as pio

from config import Config

logger = logging.getLogger(__name__)

BRAND_COLORS = {
    'primary': '#1E3A5F',      # Deep navy
    'secondary': '#2A9D8F',    # Teal
    'accent': '#E9C46A',       # Amber
    'light': '#A8DADC',        # Pale cyan
    'content': '#E76F51',      # Coral

    'palette': [
        '#1E3A5F',
        '#2A9D8F',
        '#E9C46A',
        '#F4A261',
        '#E76F51',
        '#A8DADC',
        '#457B9D',
        '#6D597A',
    ],

    # Reaction role colors
    'role_colors': {
        'hasReactant': '#1E3A5F',
        'hasProduct': '#2A9D8F',
        'hasSolvent': '#457B9D',
        'hasCatalyst': '#E9C46A',
        'hasAgent': '#E76F51',
    }
}

# Plotly configuration for consistent styling and downloads
config = {
    "responsive": True,
    "toImageButtonOptions": {
        "format": "png",
        "filename": "chemkg_plot",
        "height": 500,
        "width": 800,
        "scale": 4
    }
}

# Global data cache for CSV export functionality
_plot_data_cache = {}
_plot_figure_cache = {}  # Plotly figure objects for PNG/SVG export


def bar_chart_html(df: pd.DataFrame, x: str, y: str, title: str, cache_key: str,
                   horizontal: bool = False, hover_data: Optional[List[str]] = None) -> str:
    """Render a branded bar chart and register it in the export caches.

    Args:
        df (pd.DataFrame): Chart data.
        x (str): Column on the category axis.
        y (str): Column with the bar values.
        title (str): Chart title.
        cache_key (str): Key under which data and figure are cached for export.
        horizontal (bool): Draw horizontal bars with the largest value on top.
        hover_data (Optional[List[str]]): Extra columns shown on hover.

    Returns:
        str: HTML fragment (Plotly.js loaded from CDN).
    """
    if horizontal:
        fig = px.bar(df, x=y, y=x, orientation="h", title=title, text=y, hover_data=hover_data,
                     color_discrete_sequence=[BRAND_COLORS['primary']])
        fig.update_layout(yaxis=dict(autorange="reversed"))
    else:
        fig = px.bar(df, x=x, y=y, title=title, text=y, hover_data=hover_data,
                     color_discrete_sequence=[BRAND_COLORS['secondary']])

    fig.update_traces(textposition="outside")
    fig.update_layout(
        template="plotly_white",
        showlegend=False,
        autosize=True,
        margin=dict(l=50, r=20, t=50, b=50)
    )

    _plot_data_cache[cache_key] = df
    _plot_figure_cache[cache_key] = fig
    return pio.to_html(fig, full_html=False, include_plotlyjs="cdn", config=config)


def create_fallback_plot(title: str, error_message: str) -> str:
    """Create a styled chart that reports why the real chart is unavailable.

    Args:
        title (str): Name of the chart that failed.
        error_message (str): Reason shown to the user.

    Returns:
        str: HTML fragment with a single annotated, axis-less chart.
    """
    fig = px.scatter(x=[0], y=[0], title=f"{title} - Data Unavailable")
    fig.add_annotation(
        x=0, y=0,
        text=f"Unable to load data: {error_message}",
        showarrow=False,
        font=dict(size=16, color="red"),
        bgcolor="white",
        bordercolor="red",
        borderwidth=2
    )
    fig.update_layout(
        template="plotly_white",
        showlegend=False,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        autosize=True,
        margin=dict(l=50, r=20, t=50, b=50)
    )
    return pio.to_html(fig, full_html=False, include_plotlyjs="cdn", config={"responsive": True})


def safe_plot_execution(plot_func, *args, **kwargs) -> Any:
    """Run a plot function, returning a fallback chart if it raises.

    Args:
        plot_func: Callable producing an HTML fragment.
        *args: Positional arguments for plot_func.
        **kwargs: Keyword arguments for plot_func.

    Returns:
        str: The chart HTML, or create_fallback_plot() output on failure.
    """
    try:
        start_time = time.time()
        result = plot_func(*args, **kwargs)
        execution_time = time.time() - start_time

        if Config.ENABLE_PERFORMANCE_LOGGING:
            logger.info(f"Plot function {plot_func.__name__} executed in {execution_time:.2f}s")
        return result

    except Exception as e:
        logger.error(f"Error in plot function {plot_func.__name__}: {str(e)}")
        return create_fallback_plot(plot_func.__name__, str(e))


def export_figure_as_image(plot_name: str, format: str = 'png', width: int = 1200, height: int = 800) -> Optional[bytes]:
    """Export a cached Plotly figure as PNG or SVG.

    Returns:
        bytes: Image data, or None if the plot is not cached or export fails.
    """
    if plot_name not in _plot_figure_cache:
        logger.error(f"Plot {plot_name} not found in figure cache")
        return None

    try:
        image_bytes = pio.to_image(
            _plot_figure_cache[plot_name],
            format=format,
            width=width,
            height=height,
            engine='kaleido'
        )
    except (ValueError, RuntimeError) as e:
        logger.error(f"Error exporting {plot_name} as {format}: {e}")
        return None

    logger.info(f"Successfully exported {plot_name} as {format.upper()}")
    return image_bytes


def get_csv_with_metadata(plot_name: str, include_metadata: bool = True) -> Optional[str]:
    """Generate CSV text for a cached plot, optionally with a metadata header.

    Example:
        >>> csv_data = get_csv_with_metadata('top_solvents')
        >>> print(csv_data.splitlines()[0])
        # ChemKG Explorer Export
    """
    if plot_name not in _plot_data_cache:
        logger.error(f"Plot {plot_name} not found in data cache")
        return None

    df = _plot_data_cache[plot_name]
    if not include_metadata:
        return df.to_csv(index=False)

    metadata_lines = [
        "# ChemKG Explorer Export",
        f"# Export Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"# Plot: {plot_name}",
        f"# Data Source: {Config.repository_endpoint()}",
        f"# Rows: {len(df)}",
        "#"
    ]
    if 'Source' in df.columns and not df.empty:
        metadata_lines.insert(3, f"# Data Origin: {df['Source'].iloc[0]}")

    return '\n'.join(metadata_lines) + '\n' + df.to_csv(index=False)


def create_bulk_download(plot_names: list, formats: list = ('csv', 'png', 'svg')) -> Optional[bytes]:
    """Create a ZIP archive with several cached plots in several formats.

    Plots missing from the caches are skipped.

    Returns:
        bytes: ZIP file contents, or None if no file could be added.
    """
    zip_buffer = io.BytesIO()
    added = 0

    with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zip_file:
        for plot_name in plot_names:
            if 'csv' in formats:
                csv_data = get_csv_with_metadata(plot_name, include_metadata=True)
                if csv_data:
                    zip_file.writestr(f'{plot_name}.csv', csv_data)
                    added += 1

            for image_format in ('png', 'svg'):
                if image_format in formats:
                    image_bytes = export_figure_as_image(plot_name, image_format)
                    if image_bytes:
                        zip_file.writestr(f'{plot_name}.{image_format}', image_bytes)
                        added += 1

    if not added:
        logger.error(f"Bulk download produced no files for {plot_names}")
        return None

    logger.info(f"Created ZIP with {added} files for {len(plot_names)} plots")
    return zip_buffer.getvalue()
