"""ChemKG Explorer - Dashboard Statistics.

Aggregate queries shown on the dashboard landing page: overall counts, the
most used solvents, the most recent reactions and the compounds involved in
the most reactions.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from config import Config
from .shared import (
    EngineQueryFailed,
    InvalidArgument,
    binding_int,
    binding_value,
    prefix_declaration,
    select_bindings,
)

logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    total_reactions: int
    total_compounds: int
    patents_covered: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TopSolvent:
    solvent: str
    smiles: Optional[str]
    label: Optional[str]
    times_used: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RecentReaction:
    reaction: str
    reaction_id: Optional[str]
    year: Optional[int]
    reaction_smiles: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PopularCompound:
    compound: str
    smiles: Optional[str]
    label: Optional[str]
    reactions_involved: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_limit(limit: int) -> int:
    if limit < 1:
        raise InvalidArgument("limit must be >= 1")
    return limit


def build_dashboard_stats_query() -> str:
    return f"""{prefix_declaration()}

SELECT (COUNT(DISTINCT ?reaction) AS ?total_reactions)
       (COUNT(DISTINCT ?compound) AS ?total_compounds)
       (COUNT(DISTINCT ?patent) AS ?total_patents)
WHERE {{
  {{ ?reaction a ck:Reaction }}
  UNION
  {{ ?compound a ck:Compound }}
  UNION
  {{ ?patent a ck:Patent }}
}}
"""


def build_top_solvents_query(limit: int = 20) -> str:
    return f"""{prefix_declaration()}

SELECT ?solvent ?smiles ?label (COUNT(DISTINCT ?reaction) AS ?times_used)
WHERE {{
  ?reaction ck:hasSolvent ?solvent .
  OPTIONAL {{ ?solvent ck:smiles ?smiles }}
  OPTIONAL {{ ?solvent ck:label ?label }}
}}
GROUP BY ?solvent ?smiles ?label
ORDER BY DESC(?times_used)
LIMIT {_check_limit(limit)}
"""


def build_recent_reactions_query(limit: int = 20) -> str:
    return f"""{prefix_declaration()}

SELECT ?reaction ?reaction_id ?year ?reaction_smiles
WHERE {{
  ?reaction a ck:Reaction .
  OPTIONAL {{ ?reaction ck:reactionId ?reaction_id }}
  OPTIONAL {{ ?reaction ck:year ?year }}
  OPTIONAL {{ ?reaction ck:reactionSmiles ?reaction_smiles }}
}}
ORDER BY DESC(?year) DESC(?reaction_id)
LIMIT {_check_limit(limit)}
"""


def build_popular_compounds_query(limit: int = 30) -> str:
    return f"""{prefix_declaration()}

SELECT ?compound ?smiles ?label (COUNT(DISTINCT ?reaction) AS ?reactions_involved)
WHERE {{
  ?reaction a ck:Reaction ;
            ?role ?compound .
  FILTER(?role IN (ck:hasReactant, ck:hasProduct, ck:hasSolvent, ck:hasCatalyst))
  OPTIONAL {{ ?compound ck:smiles ?smiles }}
  OPTIONAL {{ ?compound ck:label ?label }}
}}
GROUP BY ?compound ?smiles ?label
ORDER BY DESC(?reactions_involved)
LIMIT {_check_limit(limit)}
"""


def get_dashboard_stats() -> DashboardStats:
    """Return total reaction, compound and patent counts.

    Raises:
        EngineQueryFailed: If GraphDB fails or returns no row.
    """
    bindings = select_bindings(build_dashboard_stats_query(), timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    if not bindings:
        raise EngineQueryFailed("No dashboard stats returned from GraphDB")

    b = bindings[0]
    return DashboardStats(
        total_reactions=binding_int(b, "total_reactions"),
        total_compounds=binding_int(b, "total_compounds"),
        patents_covered=binding_int(b, "total_patents"),
    )


def get_top_solvents(limit: int = 20) -> List[TopSolvent]:
    bindings = select_bindings(build_top_solvents_query(limit), timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    return [
        TopSolvent(
            solvent=binding_value(b, "solvent", ""),
            smiles=binding_value(b, "smiles"),
            label=binding_value(b, "label"),
            times_used=binding_int(b, "times_used"),
        )
        for b in bindings
    ]


def get_recent_reactions(limit: int = 20) -> List[RecentReaction]:
    bindings = select_bindings(build_recent_reactions_query(limit), timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    return [
        RecentReaction(
            reaction=binding_value(b, "reaction", ""),
            reaction_id=binding_value(b, "reaction_id"),
            year=binding_int(b, "year", None),
            reaction_smiles=binding_value(b, "reaction_smiles"),
        )
        for b in bindings
    ]


def get_popular_compounds(limit: int = 30) -> List[PopularCompound]:
    bindings = select_bindings(build_popular_compounds_query(limit), timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    return [
        PopularCompound(
            compound=binding_value(b, "compound", ""),
            smiles=binding_value(b, "smiles"),
            label=binding_value(b, "label"),
            reactions_involved=binding_int(b, "reactions_involved"),
        )
        for b in bindings
    ]
