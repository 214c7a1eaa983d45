"""Tests for pathway query building and result parsing."""

import re
from unittest.mock import patch

import pytest

from services import (
    DetailedPath,
    InvalidArgument,
    NodeKind,
    build_multi_set_path_query,
    build_path_find_query,
    build_reaction_participants_query,
    find_paths,
    get_multi_set_paths,
    get_reaction_participants,
    plan_chain,
)
from services.pathways import clean_identifiers, keep_shortest_paths, parse_detailed_paths


def _union_count(query):
    return len(re.findall(r"^\s*UNION\s*$", query, flags=re.MULTILINE))


class TestPlanChain:
    """Tests for hop descriptor planning."""

    def test_single_hop_links_start_to_target(self):
        hops = plan_chain(1)

        assert len(hops) == 1
        assert hops[0].source.kind is NodeKind.START
        assert hops[0].product.kind is NodeKind.TARGET
        assert hops[0].reaction_variable == "?reaction_1"

    def test_intermediates_are_positional(self):
        hops = plan_chain(3)

        assert [h.source.variable for h in hops] == ["?start_node", "?mid_1", "?mid_2"]
        assert [h.product.variable for h in hops] == ["?mid_1", "?mid_2", "?target_node"]
        assert hops[1].source.identifier_variable == "?mid_1_identifier"

    def test_zero_length_rejected(self):
        with pytest.raises(InvalidArgument):
            plan_chain(0)


class TestBuildMultiSetPathQuery:
    """Tests for the detailed multi-step pathway query."""

    @pytest.mark.parametrize("starts,targets", [([], ["B"]), (["A"], []), ([], [])])
    def test_empty_sets_rejected(self, starts, targets):
        with pytest.raises(InvalidArgument):
            build_multi_set_path_query(starts, targets, 2)

    @pytest.mark.parametrize("max_steps", [0, -1, True, "2", 1.5])
    def test_invalid_step_bound_rejected(self, max_steps):
        with pytest.raises(InvalidArgument):
            build_multi_set_path_query(["A"], ["B"], max_steps)

    def test_single_step_has_one_branch(self):
        query = build_multi_set_path_query(["A"], ["B"], 1)

        assert _union_count(query) == 0
        assert "?reaction_1 ck:hasReactant ?start_node" in query
        assert "ck:hasProduct ?target_node" in query
        assert "?reaction_2" not in query
        assert "?mid_" not in query
        assert '"A"' in query
        assert '"B"' in query

    def test_three_steps_three_branches(self):
        query = build_multi_set_path_query(["A"], ["B"], 3)

        assert _union_count(query) == 2
        assert query.count("-step chain") == 3
        select_line = next(line for line in query.splitlines() if line.startswith("SELECT DISTINCT"))
        mids = set(re.findall(r"\?mid_(\d+)_identifier", select_line))
        assert mids == {"1", "2"}
        for i in (1, 2, 3):
            assert f"?reaction_{i}_id" in select_line
        assert "?target_identifier" in select_line

    def test_quote_is_escaped(self):
        query = build_multi_set_path_query(['a"b'], ["B"], 1)

        assert '"a\\"b"' in query
        assert '"a"b"' not in query

    def test_backslash_is_escaped(self):
        query = build_multi_set_path_query(["a\\b"], ["B"], 1)

        assert '"a\\\\b"' in query

    def test_all_starts_must_be_consumed(self):
        query = build_multi_set_path_query(["A", "B"], ["C"], 1)

        assert "HAVING (COUNT(DISTINCT ?start_match) = 2)" in query
        assert "HAVING (COUNT(DISTINCT ?target_match) = 1)" in query

    def test_duplicate_starts_counted_once(self):
        query = build_multi_set_path_query(["A", "A"], ["C"], 1)

        assert "HAVING (COUNT(DISTINCT ?start_match) = 1)" in query

    def test_idempotent(self):
        first = build_multi_set_path_query(["A", "B"], ["C", "D"], 3)
        second = build_multi_set_path_query(["A", "B"], ["C", "D"], 3)

        assert first == second


class TestBuildPathFindQuery:
    """Tests for the reachability summary query."""

    def test_branch_per_length(self):
        query = build_path_find_query(["A"], ["B"], 2, limit=10)

        assert _union_count(query) == 1
        assert "(^ck:hasReactant/ck:hasProduct)/(^ck:hasReactant/ck:hasProduct)" in query
        assert "LIMIT 10" in query

    def test_default_limit_from_config(self, monkeypatch):
        from config import Config

        monkeypatch.setattr(Config, "PATH_RESULT_LIMIT", 42)
        assert "LIMIT 42" in build_path_find_query(["A"], ["B"], 1)

    def test_invalid_limit(self):
        with pytest.raises(InvalidArgument):
            build_path_find_query(["A"], ["B"], 1, limit=0)


def test_participants_query_requires_id():
    with pytest.raises(InvalidArgument):
        build_reaction_participants_query("  ")

    assert '"RXN-1"' in build_reaction_participants_query(" RXN-1 ")


class TestParsing:
    """Tests for turning result rows into pathway objects."""

    def test_clean_identifiers(self):
        assert clean_identifiers([" A ", "", "B", "A", None]) == ["A", "B"]

    def test_parse_two_step_row(self, row):
        binding = row(reaction_1="urn:r1", reaction_1_id="RXN-1", reaction_2="urn:r2",
                      mid_1_identifier="M", target_identifier="B", step_count=2)

        paths = parse_detailed_paths([binding], ["A"], ["B"], 3)

        assert len(paths) == 1
        assert paths[0].step_count == 2
        assert paths[0].intermediates == ["M"]
        assert paths[0].reaction_ids == ["RXN-1", None]
        assert paths[0].reaction_iris == ["urn:r1", "urn:r2"]
        assert paths[0].start_identifiers == ["A"]

    def test_step_count_inferred_from_reactions(self, row):
        binding = row(reaction_1="urn:r1", reaction_2="urn:r2", reaction_3="urn:r3", target_identifier="B")

        paths = parse_detailed_paths([binding], ["A"], ["B"], 3)

        assert paths[0].step_count == 3

    def test_row_without_reactions_dropped(self, row):
        assert parse_detailed_paths([row(target_identifier="B")], ["A"], ["B"], 2) == []

    def test_keep_shortest_per_target(self):
        paths = [
            DetailedPath(["A"], "B", step_count=2),
            DetailedPath(["A"], "B", step_count=1),
            DetailedPath(["A"], "C", step_count=3),
        ]

        kept = keep_shortest_paths(paths)

        assert [(p.target_identifier, p.step_count) for p in kept] == [("B", 1), ("C", 3)]


class TestServiceFunctions:
    """Tests for the GraphDB-backed pathway functions."""

    def test_get_multi_set_paths_sorted(self, row):
        bindings = [
            row(reaction_1="urn:r1", reaction_2="urn:r2", mid_1_identifier="M",
                target_identifier="B", step_count=2),
            row(reaction_1="urn:r3", target_identifier="B", step_count=1),
        ]
        with patch("services.pathways.select_bindings", return_value=bindings) as select:
            paths = get_multi_set_paths([" A "], ["B"], 2)

        assert [p.step_count for p in paths] == [1, 2]
        query = select.call_args[0][0]
        assert '"A"' in query and '" A "' not in query

    def test_get_multi_set_paths_shortest_only(self, row):
        bindings = [
            row(reaction_1="urn:r1", reaction_2="urn:r2", target_identifier="B", step_count=2),
            row(reaction_1="urn:r3", target_identifier="B", step_count=1),
        ]
        with patch("services.pathways.select_bindings", return_value=bindings):
            paths = get_multi_set_paths(["A"], ["B"], 2, shortest_only=True)

        assert len(paths) == 1
        assert paths[0].reaction_iris == ["urn:r3"]

    def test_blank_inputs_never_query(self):
        with patch("services.pathways.select_bindings") as select:
            with pytest.raises(InvalidArgument):
                get_multi_set_paths(["  "], ["B"], 2)
        select.assert_not_called()

    def test_find_paths_shortest_per_pair(self, row):
        bindings = [
            row(start_identifier="A", target_identifier="B", step_count=1),
            row(start_identifier="A", target_identifier="B", step_count=3),
            row(start_identifier="A", target_identifier="C", step_count=2),
        ]
        with patch("services.pathways.select_bindings", return_value=bindings):
            all_rows = find_paths(["A"], ["B", "C"], 3)
            shortest = find_paths(["A"], ["B", "C"], 3, shortest_only=True)

        assert len(all_rows) == 3
        assert [(r.target_identifier, r.steps) for r in shortest] == [("B", 1), ("C", 2)]

    def test_reaction_participants(self, row):
        bindings = [row(role="hasReactant", compound_identifier="BrCCO", patent_id="US1")]
        with patch("services.pathways.select_bindings", return_value=bindings):
            participants = get_reaction_participants("RXN-1")

        assert participants[0].role == "hasReactant"
        assert participants[0].smiles == "BrCCO"
        assert participants[0].label is None
        assert participants[0].patent_id == "US1"


def test_participant_role_strips_namespace_literally(monkeypatch):
    from config import Config

    monkeypatch.setattr(Config, "CHEMKG_NAMESPACE", 'http://example.org/chem"kg?v=1#')
    query = build_reaction_participants_query("RXN-1")

    assert 'BIND(STRAFTER(STR(?prop), "http://example.org/chem\\"kg?v=1#") AS ?role)' in query
    assert "REPLACE(" not in query
