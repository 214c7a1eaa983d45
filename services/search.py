"""ChemKG Explorer - Compound and Reaction Search.

Compound search ranks compounds by how well a free-text term matches the
compound itself and the reactions and patents it takes part in:

    ==========================  =====
    Match                       Score
    ==========================  =====
    SMILES equals term          20
    SMILES contains term        10
    label contains term         8
    reaction SMILES contains    4
    reaction id contains        2
    patent id contains          1
    ==========================  =====

Scores are summed over every (compound, reaction) row, so compounds involved
in many matching reactions rank higher. Matching is case-insensitive.

Reaction search combines a free-text filter with structural filters on
reactants, products, catalysts and solvents.
"""

import logging
import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from config import Config
from .shared import (
    InvalidArgument,
    binding_int,
    binding_value,
    format_literal,
    prefix_declaration,
    select_bindings,
)

logger = logging.getLogger(__name__)

_GROUP_SEPARATOR = re.compile(r"\s*,\s*")


@dataclass
class CompoundSearchResult:
    compound_iri: str
    smiles: Optional[str]
    label: Optional[str]
    score: int
    reaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReactionSearchFilters:
    """Filters accepted by search_reactions().

    ``require_catalyst`` and ``require_solvent`` are tri-state: True means the
    reaction must have one, False means it must not, None ignores the role.
    """

    text: Optional[str] = None
    reactant_smiles: Optional[str] = None
    product_smiles: Optional[str] = None
    require_catalyst: Optional[bool] = None
    require_solvent: Optional[bool] = None
    limit: int = 50
    offset: int = 0


@dataclass
class ReactionSearchResult:
    reaction_iri: str
    reaction_id: Optional[str]
    reaction_smiles: Optional[str]
    patent_id: Optional[str]
    reactant_smiles: List[str] = field(default_factory=list)
    product_smiles: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_compound_search_query(term: str, limit: int = 20) -> str:
    """Build the scored compound search query for ``term``."""
    if limit < 1:
        raise InvalidArgument("limit must be >= 1")

    return f"""{prefix_declaration()}

SELECT ?compound ?smiles ?label
       (SUM(?match_score) AS ?score)
       (COUNT(DISTINCT ?reaction) AS ?reaction_count)
WHERE {{
  BIND(LCASE({format_literal(term)}) AS ?q)

  ?compound a ck:Compound .
  OPTIONAL {{ ?compound ck:smiles ?smiles . }}
  OPTIONAL {{ ?compound ck:label ?label . }}

  OPTIONAL {{
    ?reaction (ck:hasReactant|ck:hasProduct|ck:hasAgent) ?compound .
    OPTIONAL {{ ?reaction ck:reactionSmiles ?reaction_smiles . }}
    OPTIONAL {{ ?reaction ck:reactionId ?reaction_id . }}
    OPTIONAL {{
      ?reaction ck:documentedIn ?patent .
      OPTIONAL {{ ?patent ck:hasPatentId ?patent_id }}
    }}
  }}

  BIND(IF(BOUND(?smiles) && LCASE(?smiles) = ?q, 20,
          IF(BOUND(?smiles) && CONTAINS(LCASE(?smiles), ?q), 10, 0)) AS ?score_smiles)
  BIND(IF(BOUND(?label) && CONTAINS(LCASE(?label), ?q), 8, 0) AS ?score_label)
  BIND(IF(BOUND(?reaction_smiles) && CONTAINS(LCASE(?reaction_smiles), ?q), 4, 0) AS ?score_reaction_smiles)
  BIND(IF(BOUND(?reaction_id) && CONTAINS(LCASE(?reaction_id), ?q), 2, 0) AS ?score_reaction_id)
  BIND(IF(BOUND(?patent_id) && CONTAINS(LCASE(?patent_id), ?q), 1, 0) AS ?score_patent)

  BIND((?score_smiles + ?score_label + ?score_reaction_smiles + ?score_reaction_id + ?score_patent)
       AS ?match_score)
  FILTER(?match_score > 0)
}}
GROUP BY ?compound ?smiles ?label
HAVING (SUM(?match_score) > 0)
ORDER BY DESC(?score) DESC(?reaction_count)
LIMIT {limit}
"""


def search_compounds(term: str, limit: int = 20) -> List[CompoundSearchResult]:
    """Search compounds by a free-text or SMILES-like term.

    A blank term returns an empty list without querying GraphDB.
    """
    term = (term or "").strip()
    if not term:
        return []

    query = build_compound_search_query(term, limit)
    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)

    results = [
        CompoundSearchResult(
            compound_iri=binding_value(b, "compound", ""),
            smiles=binding_value(b, "smiles"),
            label=binding_value(b, "label"),
            score=binding_int(b, "score"),
            reaction_count=binding_int(b, "reaction_count"),
        )
        for b in bindings
    ]
    logger.info(f"Compound search for {term!r} returned {len(results)} results")
    return results


def _presence_filter(required: Optional[bool], predicate: str, variable: str) -> str:
    if required is True:
        return f"FILTER EXISTS {{ ?reaction {predicate} {variable} . }}"
    if required is False:
        return f"FILTER NOT EXISTS {{ ?reaction {predicate} {variable} . }}"
    return ""


def _participant_filter(smiles: Optional[str], predicate: str, variable: str) -> str:
    if not smiles or not smiles.strip():
        return ""
    return (f"FILTER EXISTS {{\n    ?reaction {predicate} {variable} .\n"
            f"    {variable} ck:smiles {format_literal(smiles.strip())} .\n  }}")


def build_reaction_search_query(filters: ReactionSearchFilters) -> str:
    """Build the reaction search query for ``filters``.

    An empty text term disables the free-text filter.
    """
    if filters.limit < 1:
        raise InvalidArgument("limit must be >= 1")
    if filters.offset < 0:
        raise InvalidArgument("offset must be >= 0")

    text = (filters.text or "").strip().lower()
    extra_filters = [
        _participant_filter(filters.reactant_smiles, "ck:hasReactant", "?required_reactant"),
        _participant_filter(filters.product_smiles, "ck:hasProduct", "?required_product"),
        _presence_filter(filters.require_catalyst, "ck:hasCatalyst", "?catalyst"),
        _presence_filter(filters.require_solvent, "ck:hasSolvent", "?solvent"),
    ]
    extra_block = "\n  ".join(f for f in extra_filters if f)

    return f"""{prefix_declaration()}

SELECT ?reaction ?reaction_id ?reaction_smiles ?patent_id
       (GROUP_CONCAT(DISTINCT ?reactant_smiles; separator=", ") AS ?reactants)
       (GROUP_CONCAT(DISTINCT ?product_smiles; separator=", ") AS ?products)
WHERE {{
  ?reaction a ck:Reaction .

  OPTIONAL {{ ?reaction ck:reactionId ?reaction_id . }}
  OPTIONAL {{ ?reaction ck:reactionSmiles ?reaction_smiles . }}
  OPTIONAL {{
    ?reaction ck:documentedIn ?patent .
    OPTIONAL {{ ?patent ck:hasPatentId ?patent_id . }}
  }}

  OPTIONAL {{
    ?reaction ck:hasReactant ?reactant .
    OPTIONAL {{ ?reactant ck:smiles ?reactant_smiles . }}
    OPTIONAL {{ ?reactant ck:label ?reactant_label . }}
  }}
  OPTIONAL {{
    ?reaction ck:hasProduct ?product .
    OPTIONAL {{ ?product ck:smiles ?product_smiles . }}
    OPTIONAL {{ ?product ck:label ?product_label . }}
  }}

  BIND({format_literal(text)} AS ?q)
  FILTER(
    ?q = "" ||
    (BOUND(?reaction_id) && CONTAINS(LCASE(?reaction_id), ?q)) ||
    (BOUND(?reaction_smiles) && CONTAINS(LCASE(?reaction_smiles), ?q)) ||
    (BOUND(?patent_id) && CONTAINS(LCASE(?patent_id), ?q)) ||
    (BOUND(?reactant_smiles) && CONTAINS(LCASE(?reactant_smiles), ?q)) ||
    (BOUND(?product_smiles) && CONTAINS(LCASE(?product_smiles), ?q)) ||
    (BOUND(?reactant_label) && CONTAINS(LCASE(?reactant_label), ?q)) ||
    (BOUND(?product_label) && CONTAINS(LCASE(?product_label), ?q))
  )

  {extra_block}
}}
GROUP BY ?reaction ?reaction_id ?reaction_smiles ?patent_id
ORDER BY COALESCE(?reaction_id, ?reaction_smiles)
LIMIT {filters.limit}
OFFSET {filters.offset}
"""


def _split_group(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part for part in _GROUP_SEPARATOR.split(value) if part]


def search_reactions(filters: ReactionSearchFilters) -> List[ReactionSearchResult]:
    """Run a reaction search and return the matching reactions."""
    query = build_reaction_search_query(filters)
    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)

    return [
        ReactionSearchResult(
            reaction_iri=binding_value(b, "reaction", ""),
            reaction_id=binding_value(b, "reaction_id"),
            reaction_smiles=binding_value(b, "reaction_smiles"),
            patent_id=binding_value(b, "patent_id"),
            reactant_smiles=_split_group(binding_value(b, "reactants")),
            product_smiles=_split_group(binding_value(b, "products")),
        )
        for b in bindings
    ]
