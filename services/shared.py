"""ChemKG Explorer - Shared GraphDB Utilities.

This module contains the shared building blocks used by every ChemKG service
module: the error taxonomy, SPARQL literal escaping, the GraphDB query executor
and helpers for reading SPARQL JSON result bindings.

Core Components:
    - ChemKGError, InvalidArgument, EngineQueryFailed: error taxonomy
    - escape_literal() / format_literal(): safe interpolation of string values
    - execute_sparql_query(): POST a query to a GraphDB repository
    - select_bindings(): execute a SELECT and return its result rows
    - binding_value() / binding_int(): read values out of result rows
    - check_graphdb_health(): endpoint monitoring for the /health route

GraphDB Integration:
    - Endpoint: {Config.GRAPHDB_BASE_URL}/repositories/{repository}
    - Transport: SPARQLWrapper, POSTing the raw query text
      (Content-Type: application/sparql-query)
    - Request parameters: ``infer`` (true/false) and ``timeout`` (seconds)
    - Response: SPARQL 1.1 JSON results

Error Handling:
    Query execution never retries. Any failure reported by the endpoint or the
    network is logged and re-raised as EngineQueryFailed with the original
    message attached, so callers decide whether to retry or fall back.

Usage Examples:
    >>> from services.shared import select_bindings, binding_value
    >>> rows = select_bindings("SELECT ?s WHERE { ?s ?p ?o } LIMIT 1")
    >>> [binding_value(r, "s") for r in rows]
"""

import logging
import math
import re
import socket
import time
from typing import Any, Dict, Iterable, List, Optional
from urllib.error import HTTPError, URLError

import requests
from SPARQLWrapper import SPARQLWrapper, JSON, POST, POSTDIRECTLY, SPARQLExceptions

from config import Config

# Configure logging
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
                    format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SLOW_QUERY_SECONDS = 10

# Characters that may not appear inside an IRIREF
_INVALID_IRI_CHARS = re.compile(r'[\s<>"{}|^`\\]')


class ChemKGError(Exception):
    """Base exception for all ChemKG service errors."""

    pass


class InvalidArgument(ChemKGError, ValueError):
    """Caller supplied arguments a query cannot be built from.

    Raised synchronously by the query builders; the query never reaches GraphDB.
    """

    pass


class EngineQueryFailed(ChemKGError, RuntimeError):
    """GraphDB (or the network in front of it) failed to answer a query.

    Attributes:
        message (str): The engine's error message.
        status (Optional[int]): HTTP status code when the endpoint returned one.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def prefix_declaration() -> str:
    """Return the PREFIX line binding ``ck:`` to the configured namespace."""
    return f"PREFIX ck: <{Config.CHEMKG_NAMESPACE}>"


def escape_literal(value: str) -> str:
    """Escape backslashes and double quotes for a SPARQL string literal.

    Backslashes are escaped first so the escape characters added for quotes are
    not doubled.

    Example:
        >>> escape_literal('a"b')
        'a\\\\"b'
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def format_literal(value: str) -> str:
    """Return ``value`` as a double-quoted, escaped SPARQL string literal."""
    return f'"{escape_literal(value)}"'


def format_literal_list(values: Iterable[str], separator: str = " ") -> str:
    """Format several values as literals joined by ``separator``.

    VALUES blocks take space-separated terms, IN (...) takes comma-separated.
    """
    return separator.join(format_literal(v) for v in values)


def validate_iri(iri: str) -> str:
    """Check that ``iri`` can be written as ``<iri>`` inside a query.

    Raises:
        InvalidArgument: If the IRI is empty or contains forbidden characters.
    """
    if not iri or _INVALID_IRI_CHARS.search(iri):
        raise InvalidArgument(f"Invalid compound IRI: {iri!r}")
    return iri


def _timeout_seconds(timeout_ms: int) -> int:
    return max(1, math.ceil(timeout_ms / 1000))


def execute_sparql_query(query: str, repository: Optional[str] = None, infer: Optional[bool] = None,
                         timeout_ms: Optional[int] = None) -> Dict[str, Any]:
    """Execute a SPARQL query against a GraphDB repository.

    The query text is POSTed directly as the request body. ``infer`` and
    ``timeout`` are passed as request parameters so GraphDB applies them on the
    server side; the same timeout bounds the client socket.

    Args:
        query (str): SPARQL query text.
        repository (str, optional): Repository id. Defaults to Config.GRAPHDB_REPOSITORY.
        infer (bool, optional): Enable inference. Defaults to Config.GRAPHDB_INFER.
        timeout_ms (int, optional): Timeout in milliseconds. Defaults to
            Config.SPARQL_TIMEOUT_MS.

    Returns:
        Dict[str, Any]: Decoded SPARQL JSON result with ``head.vars`` and
            ``results.bindings``. Each binding maps a variable name to
            ``{"type", "value", "xml:lang"?, "datatype"?}``.

    Raises:
        EngineQueryFailed: On any endpoint, HTTP, network, timeout or decoding
            failure. There is no retry.
    """
    repository = repository or Config.GRAPHDB_REPOSITORY
    infer = Config.GRAPHDB_INFER if infer is None else infer
    timeout_ms = timeout_ms or Config.SPARQL_TIMEOUT_MS
    endpoint = Config.repository_endpoint(repository)
    timeout_s = _timeout_seconds(timeout_ms)

    sparql = SPARQLWrapper(endpoint)
    sparql.setMethod(POST)
    sparql.setRequestMethod(POSTDIRECTLY)
    sparql.setOnlyConneg(True)
    sparql.setReturnFormat(JSON)
    sparql.setTimeout(timeout_s)
    sparql.addParameter("infer", "true" if infer else "false")
    sparql.addParameter("timeout", str(timeout_s))
    sparql.setQuery(query)

    start_time = time.time()
    try:
        result = sparql.query().convert()
    except SPARQLExceptions.QueryBadFormed as e:
        logger.error(f"Bad SPARQL query rejected by {endpoint}: {str(e)}")
        raise EngineQueryFailed(str(e), status=400) from e
    except SPARQLExceptions.Unauthorized as e:
        logger.error(f"Unauthorized query against {endpoint}: {str(e)}")
        raise EngineQueryFailed(str(e), status=401) from e
    except SPARQLExceptions.EndPointNotFound as e:
        logger.error(f"GraphDB repository not found: {endpoint}")
        raise EngineQueryFailed(str(e), status=404) from e
    except SPARQLExceptions.URITooLong as e:
        logger.error(f"Query URI too long for {endpoint}")
        raise EngineQueryFailed(str(e), status=414) from e
    except SPARQLExceptions.EndPointInternalError as e:
        logger.error(f"GraphDB internal error: {str(e)}")
        raise EngineQueryFailed(str(e), status=500) from e
    except SPARQLExceptions.SPARQLWrapperException as e:
        logger.error(f"SPARQL query failed: {str(e)}")
        raise EngineQueryFailed(str(e)) from e
    except HTTPError as e:
        body = e.read().decode("utf-8", "replace").strip() if getattr(e, "fp", None) is not None else ""
        logger.error(f"GraphDB returned HTTP {e.code} for {endpoint}: {body or e.reason}")
        raise EngineQueryFailed(f"GraphDB error {e.code}: {body or e.reason}", status=e.code) from e
    except URLError as e:
        logger.error(f"GraphDB request to {endpoint} failed: {str(e)}")
        raise EngineQueryFailed(str(e)) from e
    except (socket.timeout, TimeoutError) as e:
        logger.error(f"GraphDB query timed out after {timeout_s}s")
        raise EngineQueryFailed(f"Query timed out after {timeout_s}s") from e
    except ValueError as e:
        logger.error(f"Could not decode GraphDB response: {str(e)}")
        raise EngineQueryFailed(f"Invalid response from GraphDB: {e}") from e

    if not isinstance(result, dict):
        raise EngineQueryFailed("Invalid response from GraphDB: expected SPARQL JSON results")

    execution_time = time.time() - start_time
    if execution_time > SLOW_QUERY_SECONDS:
        logger.warning(f"Slow query execution: {execution_time:.2f}s")
    if Config.ENABLE_PERFORMANCE_LOGGING:
        row_count = len(result.get("results", {}).get("bindings", []))
        logger.info(f"Query executed in {execution_time:.2f}s, returned {row_count} results")

    return result


def select_bindings(query: str, timeout_ms: Optional[int] = None) -> List[Dict[str, Any]]:
    """Run a SELECT query and return its result bindings.

    Uses the configured repository and inference setting.

    Raises:
        EngineQueryFailed: Propagated from execute_sparql_query().
    """
    result = execute_sparql_query(query, timeout_ms=timeout_ms)
    return result.get("results", {}).get("bindings", [])


def binding_value(binding: Dict[str, Any], name: str, default: Any = None) -> Any:
    """Return the lexical value of variable ``name`` in a result row, or ``default``."""
    term = binding.get(name)
    if not term or term.get("value") is None:
        return default
    return term["value"]


def binding_int(binding: Dict[str, Any], name: str, default: int = 0) -> int:
    """Return variable ``name`` as an int.

    Unbound or non-numeric values yield ``default``. Decimal lexical forms such
    as ``"3.0"`` are truncated.
    """
    value = binding_value(binding, name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except ValueError:
            logger.warning(f"Non-numeric value for ?{name}: {value!r}")
            return default


def check_graphdb_health() -> Dict[str, Any]:
    """Check that the GraphDB repository is reachable and answering.

    Uses the repository ``/size`` REST resource, which returns the number of
    statements as plain text and is cheap for the server to compute.

    Returns:
        Dict[str, Any]: ``{"reachable": bool, "endpoint": str,
            "statements": Optional[int], "latency_ms": Optional[float],
            "error": Optional[str]}``
    """
    endpoint = Config.repository_endpoint()
    status = {
        "reachable": False,
        "endpoint": endpoint,
        "statements": None,
        "latency_ms": None,
        "error": None,
    }

    try:
        start_time = time.time()
        response = requests.get(f"{endpoint}/size", timeout=10)
        response.raise_for_status()
        status["latency_ms"] = round((time.time() - start_time) * 1000, 1)
        status["statements"] = int(response.text.strip())
        status["reachable"] = True
        logger.info(f"GraphDB repository {endpoint} is healthy")
    except (requests.exceptions.RequestException, ValueError) as e:
        status["error"] = str(e)
        logger.error(f"GraphDB health check failed: {str(e)}")

    return status
