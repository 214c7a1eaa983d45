"""ChemKG Explorer Flask Application.

This is the main Flask application serving the ChemKG Explorer. It exposes the
chemical reaction knowledge graph held in GraphDB as JSON endpoints and Plotly
chart fragments for the browser front end (dashboard, pathway, reaction and
compound explorers, analytics).

The application features:
    - Dashboard statistics with sample-data fallback when GraphDB is down
    - Multi-step pathway search between sets of start and target compounds
    - Scored compound search and filtered reaction search
    - Per-role reaction statistics for a compound
    - Lazily generated charts with CSV/PNG/SVG export
    - Health monitoring of the GraphDB repository

Web Endpoints:
    /health: Health check endpoint for monitoring
    /api/stats, /api/solvents/top, /api/reactions/recent, /api/compounds/popular:
        dashboard data
    /api/compounds/search, /api/compounds/roles: compound explorer
    /api/reactions/search, /api/reactions/<id>/participants: reaction explorer
    /api/pathways, /api/pathways/summary: pathway explorer
    /api/plot/<name>: chart HTML fragments
    /download/<name>, /download/bulk: chart data export

Errors:
    InvalidArgument becomes a 400 response and EngineQueryFailed a 502 response,
    both as JSON ``{"error": ..., "success": false}``. Dashboard endpoints serve
    sample data instead of a 502 when Config.ENABLE_MOCK_FALLBACK is on.
"""
import logging
import time

from flask import Flask, Response, jsonify, request

from config import Config
from services import (
    EngineQueryFailed,
    InvalidArgument,
    ReactionSearchFilters,
    check_graphdb_health,
    find_paths,
    get_compound_role_reactions,
    get_compound_role_stats,
    get_dashboard_stats,
    get_multi_set_paths,
    get_popular_compounds,
    get_reaction_participants,
    get_recent_reactions,
    get_top_solvents,
    search_compounds,
    search_reactions,
)
from services.mock_data import MOCK_STATS, mock_popular_compounds, mock_recent_reactions, mock_top_solvents
from plots import (
    PLOT_FUNCTIONS,
    create_bulk_download,
    export_figure_as_image,
    get_csv_with_metadata,
    plot_path_step_distribution,
    safe_plot_execution,
)

# Configure logging
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
                    format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Validate configuration
if not Config.validate_config():
    logger.error("Invalid configuration detected, using defaults")

app = Flask(__name__)

PLOT_CATEGORIES = {
    'all': list(PLOT_FUNCTIONS),
    'dashboard': ['top_solvents', 'popular_compounds'],
    'analytics': ['solvent_usage', 'catalyst_usage', 'yield_distribution', 'common_intermediates'],
}


@app.errorhandler(InvalidArgument)
def handle_invalid_argument(e):
    return jsonify({"error": str(e), "success": False}), 400


@app.errorhandler(EngineQueryFailed)
def handle_engine_failure(e):
    logger.error(f"GraphDB query failed: {e.message}")
    return jsonify({"error": e.message, "status": e.status, "success": False}), 502


def _with_mock_fallback(name: str, fetch, mock):
    """Run a dashboard query, falling back to sample data when GraphDB fails.

    Returns:
        dict: ``{"data": ..., "source": "graphdb" | "mock", "error"?: str}``
    """
    try:
        return {"data": fetch(), "source": "graphdb"}
    except EngineQueryFailed as e:
        if not Config.ENABLE_MOCK_FALLBACK:
            raise
        logger.warning(f"Failed to load live {name}, showing mock data: {e.message}")
        return {"data": mock(), "source": "mock", "error": f"Failed to load live {name}, showing mock data."}


def _parse_tristate(value):
    """Map a query parameter to True / False / None for role requirements."""
    if value is None or value == "":
        return None
    value = value.lower()
    if value in ("true", "1", "yes", "required"):
        return True
    if value in ("false", "0", "no", "excluded"):
        return False
    raise InvalidArgument(f"Expected true/false for role filter, got {value!r}")


def _pathway_request():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidArgument("Expected a JSON object body")

    starts = payload.get("starts") or []
    targets = payload.get("targets") or []
    if not isinstance(starts, list) or not isinstance(targets, list):
        raise InvalidArgument("starts and targets must be lists of SMILES strings")
    if not all(isinstance(s, str) for s in starts + targets):
        raise InvalidArgument("starts and targets must be lists of SMILES strings")

    return starts, targets, payload.get("max_steps", 1), bool(payload.get("shortest_only", False))


@app.route("/health")
def health_check():
    """Health check endpoint for service monitoring.

    Returns:
        tuple: (dict, int) with the GraphDB repository status; 200 when the
            repository answers, 503 otherwise.

    Example Response:
        {
            "status": "healthy",
            "graphdb": "up",
            "repository": "chemkg",
            "statements": 1523342,
            "latency_ms": 12.4,
            "timestamp": 1640995200.0
        }
    """
    if not Config.ENABLE_HEALTH_CHECK:
        return {"status": "disabled"}, 404

    graphdb = check_graphdb_health()
    health_status = {
        "status": "healthy" if graphdb["reachable"] else "degraded",
        "graphdb": "up" if graphdb["reachable"] else "down",
        "repository": Config.GRAPHDB_REPOSITORY,
        "statements": graphdb["statements"],
        "latency_ms": graphdb["latency_ms"],
        "timestamp": time.time()
    }
    if graphdb["error"]:
        health_status["error"] = graphdb["error"]

    return health_status, 200 if graphdb["reachable"] else 503


@app.route("/api/stats")
def api_dashboard_stats():
    """Total reactions, compounds and patents."""
    return jsonify(_with_mock_fallback("stats", lambda: get_dashboard_stats().to_dict(), lambda: dict(MOCK_STATS)))


@app.route("/api/solvents/top")
def api_top_solvents():
    limit = request.args.get('limit', 20, type=int)
    return jsonify(_with_mock_fallback(
        "solvents",
        lambda: [s.to_dict() for s in get_top_solvents(limit)],
        lambda: mock_top_solvents()[:limit],
    ))


@app.route("/api/reactions/recent")
def api_recent_reactions():
    limit = request.args.get('limit', 20, type=int)
    return jsonify(_with_mock_fallback(
        "reactions",
        lambda: [r.to_dict() for r in get_recent_reactions(limit)],
        lambda: mock_recent_reactions()[:limit],
    ))


@app.route("/api/compounds/popular")
def api_popular_compounds():
    limit = request.args.get('limit', 30, type=int)
    return jsonify(_with_mock_fallback(
        "compounds",
        lambda: [c.to_dict() for c in get_popular_compounds(limit)],
        lambda: mock_popular_compounds()[:limit],
    ))


@app.route("/api/compounds/search")
def api_search_compounds():
    """Scored compound search.

    Query Parameters:
        q (str): Search term (SMILES fragment, name, reaction or patent id)
        limit (int): Maximum number of results (default: 20)
    """
    term = request.args.get('q', '')
    limit = request.args.get('limit', 20, type=int)
    results = search_compounds(term, limit)
    return jsonify({"results": [r.to_dict() for r in results], "count": len(results)})


@app.route("/api/compounds/roles")
def api_compound_roles():
    """Role statistics and reaction list for one compound.

    Query Parameters:
        iri (str): Compound IRI (preferred)
        smiles (str): Compound SMILES, used when no IRI is given
    """
    iri = request.args.get('iri') or None
    smiles = request.args.get('smiles') or None

    stats = get_compound_role_stats(iri=iri, smiles=smiles)
    if stats is None:
        return jsonify({"error": "Compound not found in any reaction", "success": False}), 404

    reactions = get_compound_role_reactions(iri=iri, smiles=smiles)
    return jsonify({"stats": stats.to_dict(), "reactions": [r.to_dict() for r in reactions]})


@app.route("/api/reactions/search")
def api_search_reactions():
    """Filtered reaction search.

    Query Parameters:
        q (str): Free-text term
        reactant (str): Required reactant SMILES
        product (str): Required product SMILES
        catalyst (str): "true" to require a catalyst, "false" to exclude one
        solvent (str): "true" to require a solvent, "false" to exclude one
        limit (int): Page size (default: 50)
        offset (int): Page offset (default: 0)
    """
    filters = ReactionSearchFilters(
        text=request.args.get('q'),
        reactant_smiles=request.args.get('reactant'),
        product_smiles=request.args.get('product'),
        require_catalyst=_parse_tristate(request.args.get('catalyst')),
        require_solvent=_parse_tristate(request.args.get('solvent')),
        limit=request.args.get('limit', 50, type=int),
        offset=request.args.get('offset', 0, type=int),
    )
    results = search_reactions(filters)
    return jsonify({"results": [r.to_dict() for r in results], "count": len(results)})


@app.route("/api/reactions/<reaction_id>/participants")
def api_reaction_participants(reaction_id):
    participants = get_reaction_participants(reaction_id)
    return jsonify({
        "reaction_id": reaction_id,
        "participants": [p.to_dict() for p in participants],
        "count": len(participants),
    })


@app.route("/api/pathways", methods=["POST"])
def api_multi_set_paths():
    """Detailed reaction chains between sets of start and target compounds.

    Request Body:
        {
            "starts": ["BrCCO"],
            "targets": ["C(C)S(=O)(=O)OCCBr"],
            "max_steps": 2,
            "shortest_only": false,
            "include_plot": false
        }
    """
    starts, targets, max_steps, shortest_only = _pathway_request()
    paths = get_multi_set_paths(starts, targets, max_steps, shortest_only=shortest_only)

    response = {"paths": [p.to_dict() for p in paths], "count": len(paths)}
    if paths and (request.get_json(silent=True) or {}).get("include_plot"):
        response["plot"] = safe_plot_execution(plot_path_step_distribution, paths)
    return jsonify(response)


@app.route("/api/pathways/summary", methods=["POST"])
def api_path_summary():
    """Reachable (start, target, steps) combinations; same body as /api/pathways."""
    starts, targets, max_steps, shortest_only = _pathway_request()
    rows = find_paths(starts, targets, max_steps, shortest_only=shortest_only)
    return jsonify({"paths": [r.to_dict() for r in rows], "count": len(rows)})


@app.route("/api/plot/<plot_name>")
def get_plot(plot_name):
    """Generate one chart on demand and return its HTML fragment."""
    plot_func = PLOT_FUNCTIONS.get(plot_name)
    if plot_func is None:
        return jsonify({'error': f'Plot {plot_name} not found', 'success': False}), 404

    html = safe_plot_execution(plot_func)
    return jsonify({'html': html, 'success': True})


@app.route("/download/<plot_name>")
def download_plot(plot_name):
    """Download the data or image behind a generated chart.

    Query Parameters:
        format (str): csv (default), png or svg
        metadata (str): "false" to omit the CSV metadata header

    Returns:
        Response: Attachment; 404 if the chart has not been generated yet,
            400 for unsupported formats.
    """
    export_format = request.args.get('format', 'csv').lower()
    include_metadata = request.args.get('metadata', 'true').lower() == 'true'

    if export_format == 'csv':
        csv_data = get_csv_with_metadata(plot_name, include_metadata)
        if not csv_data:
            return "No data available for download", 404

        return Response(
            csv_data,
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename={plot_name}.csv'}
        )

    elif export_format in ['png', 'svg']:
        image_bytes = export_figure_as_image(plot_name, export_format)
        if not image_bytes:
            return "No figure available for export", 404

        mimetype = 'image/svg+xml' if export_format == 'svg' else 'image/png'
        return Response(
            image_bytes,
            mimetype=mimetype,
            headers={'Content-Disposition': f'attachment; filename={plot_name}.{export_format}'}
        )

    return f"Unsupported format: {export_format}. Use csv, png, or svg.", 400


@app.route("/download/bulk")
def download_bulk():
    """Bulk download several charts in a ZIP archive.

    Query Parameters:
        plots (str): Comma-separated plot names
        category (str): Predefined category: "all", "dashboard", "analytics"
        formats (str): Comma-separated formats (default: "csv,png,svg")
    """
    category = request.args.get('category', '').lower()
    plots_param = request.args.get('plots', '')

    if category and category in PLOT_CATEGORIES:
        plot_names = PLOT_CATEGORIES[category]
    elif plots_param:
        plot_names = [p.strip() for p in plots_param.split(',') if p.strip()]
    else:
        return "Please specify either 'category' or 'plots' parameter", 400

    formats_param = request.args.get('formats', 'csv,png,svg')
    formats = [f.strip().lower() for f in formats_param.split(',') if f.strip().lower() in {'csv', 'png', 'svg'}]
    if not formats:
        return "No valid formats specified. Use csv, png, or svg.", 400

    zip_bytes = create_bulk_download(plot_names, formats)
    if not zip_bytes:
        return "No generated plots available for download", 404

    filename = f"chemkg_{category}_plots.zip" if category else f"chemkg_{len(plot_names)}_plots.zip"
    return Response(
        zip_bytes,
        mimetype='application/zip',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


# Run the Flask app
if __name__ == "__main__":
    logger.info(f"Starting ChemKG Explorer on {Config.FLASK_HOST}:{Config.FLASK_PORT}")
    logger.info(f"GraphDB repository: {Config.repository_endpoint()}")
    logger.info(f"Configuration: {Config.get_config_dict()}")

    app.run(host=Config.FLASK_HOST, port=Config.FLASK_PORT, debug=Config.FLASK_DEBUG)
