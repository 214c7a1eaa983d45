"""Tests for compound and reaction search."""

from unittest.mock import patch

import pytest

from services import (
    InvalidArgument,
    ReactionSearchFilters,
    build_compound_search_query,
    build_reaction_search_query,
    search_compounds,
    search_reactions,
)


class TestCompoundSearch:
    """Tests for scored compound search."""

    def test_query_scores(self):
        query = build_compound_search_query("CCO", 5)

        for score in (", 20,", ", 10,", ", 8,", ", 4,", ", 2,", ", 1,"):
            assert score in query
        assert 'LCASE("CCO")' in query
        assert "LIMIT 5" in query

    def test_term_escaped(self):
        assert 'LCASE("x\\"y")' in build_compound_search_query('x"y')

    def test_invalid_limit(self):
        with pytest.raises(InvalidArgument):
            build_compound_search_query("CCO", 0)

    def test_blank_term_skips_query(self):
        with patch("services.search.select_bindings") as select:
            assert search_compounds("   ") == []
        select.assert_not_called()

    def test_results(self, row):
        bindings = [row(compound="urn:c1", smiles="CCO", label="Ethanol", score="38", reaction_count="2")]
        with patch("services.search.select_bindings", return_value=bindings):
            results = search_compounds("cco")

        assert results[0].score == 38
        assert results[0].reaction_count == 2
        assert results[0].to_dict()["label"] == "Ethanol"


class TestReactionSearch:
    """Tests for filtered reaction search."""

    def test_default_filters(self):
        query = build_reaction_search_query(ReactionSearchFilters())

        assert "FILTER EXISTS" not in query
        assert "FILTER NOT EXISTS" not in query
        assert "LIMIT 50" in query
        assert "OFFSET 0" in query

    def test_structural_filters(self):
        filters = ReactionSearchFilters(text="Bromo", reactant_smiles="BrCCO", require_catalyst=True,
                                        require_solvent=False, limit=10, offset=20)

        query = build_reaction_search_query(filters)

        assert 'BIND("bromo" AS ?q)' in query
        assert 'ck:smiles "BrCCO"' in query
        assert "FILTER EXISTS { ?reaction ck:hasCatalyst ?catalyst . }" in query
        assert "FILTER NOT EXISTS { ?reaction ck:hasSolvent ?solvent . }" in query
        assert "OFFSET 20" in query

    @pytest.mark.parametrize("limit,offset", [(0, 0), (10, -1)])
    def test_invalid_paging(self, limit, offset):
        with pytest.raises(InvalidArgument):
            build_reaction_search_query(ReactionSearchFilters(limit=limit, offset=offset))

    def test_group_concat_split(self, row):
        bindings = [row(reaction="urn:r1", reaction_id="RXN-1", reactants="BrCCO, CC(C)=O", products="CC(C)OCCO")]
        with patch("services.search.select_bindings", return_value=bindings):
            results = search_reactions(ReactionSearchFilters(text="rxn"))

        assert results[0].reactant_smiles == ["BrCCO", "CC(C)=O"]
        assert results[0].product_smiles == ["CC(C)OCCO"]
        assert results[0].patent_id is None
