"""Tests for the GraphDB executor, escaping and binding helpers."""

import io
import socket
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError

import pytest
import requests
from SPARQLWrapper import SPARQLExceptions

from services.shared import (
    POSTDIRECTLY,
    EngineQueryFailed,
    InvalidArgument,
    binding_int,
    binding_value,
    check_graphdb_health,
    escape_literal,
    execute_sparql_query,
    format_literal_list,
    select_bindings,
    validate_iri,
)


class TestLiterals:
    """Tests for literal escaping and IRI validation."""

    def test_escape_quote_and_backslash(self):
        assert escape_literal('a"b') == 'a\\"b'
        assert escape_literal("a\\b") == "a\\\\b"
        assert escape_literal('\\"') == '\\\\\\"'

    def test_format_literal_list(self):
        assert format_literal_list(["A", "B"]) == '"A" "B"'
        assert format_literal_list(["A", "B"], ", ") == '"A", "B"'

    def test_validate_iri(self):
        assert validate_iri("http://example.org/chemkg#c1") == "http://example.org/chemkg#c1"

    @pytest.mark.parametrize("iri", ["", "http://x/a b", "http://x/>", 'http://x/"'])
    def test_invalid_iri(self, iri):
        with pytest.raises(InvalidArgument):
            validate_iri(iri)


class TestBindings:
    """Tests for reading values out of result rows."""

    def test_binding_value(self, row):
        binding = row(name="Ethanol")

        assert binding_value(binding, "name") == "Ethanol"
        assert binding_value(binding, "missing", "n/a") == "n/a"

    def test_binding_int(self, row):
        binding = row(count="12", decimal="3.0", text="many")

        assert binding_int(binding, "count") == 12
        assert binding_int(binding, "decimal") == 3
        assert binding_int(binding, "text") == 0
        assert binding_int(binding, "missing", None) is None


@pytest.fixture
def sparql():
    with patch("services.shared.SPARQLWrapper") as wrapper_cls:
        yield wrapper_cls.return_value


class TestExecuteSparqlQuery:
    """Tests for the GraphDB query executor."""

    def test_request_configuration(self, sparql):
        sparql.query.return_value.convert.return_value = {"head": {"vars": []}, "results": {"bindings": []}}

        execute_sparql_query("SELECT * WHERE {}", repository="chem", infer=False, timeout_ms=2500)

        sparql.setRequestMethod.assert_called_once_with(POSTDIRECTLY)
        sparql.addParameter.assert_any_call("infer", "false")
        sparql.addParameter.assert_any_call("timeout", "3")
        sparql.setTimeout.assert_called_once_with(3)
        sparql.setQuery.assert_called_once_with("SELECT * WHERE {}")

    def test_select_bindings_returns_rows(self, sparql):
        rows = [{"s": {"type": "uri", "value": "urn:a"}}]
        sparql.query.return_value.convert.return_value = {"results": {"bindings": rows}}

        assert select_bindings("SELECT ?s WHERE { ?s ?p ?o }") == rows

    @pytest.mark.parametrize("error,status", [
        (SPARQLExceptions.QueryBadFormed, 400),
        (SPARQLExceptions.Unauthorized, 401),
        (SPARQLExceptions.EndPointNotFound, 404),
        (SPARQLExceptions.URITooLong, 414),
        (SPARQLExceptions.EndPointInternalError, 500),
    ])
    def test_endpoint_errors(self, sparql, error, status):
        sparql.query.side_effect = error()

        with pytest.raises(EngineQueryFailed) as exc_info:
            execute_sparql_query("SELECT * WHERE {}")

        assert exc_info.value.status == status
        assert exc_info.value.message

    def test_http_error(self, sparql):
        sparql.query.side_effect = HTTPError("http://localhost:7200", 503, "Service Unavailable", None, None)

        with pytest.raises(EngineQueryFailed) as exc_info:
            execute_sparql_query("SELECT * WHERE {}")

        assert exc_info.value.status == 503

    def test_http_error_keeps_response_body(self, sparql):
        body = io.BytesIO(b"Query evaluation took too long: exceeded 60s timeout")
        sparql.query.side_effect = HTTPError("http://localhost:7200", 503, "Service Unavailable", {}, body)

        with pytest.raises(EngineQueryFailed) as exc_info:
            execute_sparql_query("SELECT * WHERE {}")

        assert exc_info.value.status == 503
        assert exc_info.value.message == "GraphDB error 503: Query evaluation took too long: exceeded 60s timeout"

    def test_http_error_without_body_uses_reason(self, sparql):
        sparql.query.side_effect = HTTPError("http://localhost:7200", 406, "Not Acceptable", {}, io.BytesIO(b""))

        with pytest.raises(EngineQueryFailed, match="GraphDB error 406: Not Acceptable"):
            execute_sparql_query("SELECT * WHERE {}")

    def test_timeout(self, sparql):
        sparql.query.side_effect = socket.timeout("timed out")

        with pytest.raises(EngineQueryFailed, match="timed out"):
            execute_sparql_query("SELECT * WHERE {}", timeout_ms=1000)

    def test_non_json_response(self, sparql):
        sparql.query.return_value.convert.return_value = b"<html>proxy error</html>"

        with pytest.raises(EngineQueryFailed, match="Invalid response"):
            execute_sparql_query("SELECT * WHERE {}")

    def test_no_retry(self, sparql):
        sparql.query.side_effect = SPARQLExceptions.EndPointInternalError()

        with pytest.raises(EngineQueryFailed):
            execute_sparql_query("SELECT * WHERE {}")

        assert sparql.query.call_count == 1


class TestHealthCheck:
    """Tests for the repository health probe."""

    def test_reachable(self):
        response = MagicMock(text="1523342\n")
        with patch("services.shared.requests.get", return_value=response) as get:
            status = check_graphdb_health()

        assert status["reachable"] is True
        assert status["statements"] == 1523342
        assert status["error"] is None
        assert get.call_args[0][0].endswith("/size")

    def test_unreachable(self):
        error = requests.exceptions.ConnectionError("connection refused")
        with patch("services.shared.requests.get", side_effect=error):
            status = check_graphdb_health()

        assert status["reachable"] is False
        assert "connection refused" in status["error"]
        assert status["statements"] is None
