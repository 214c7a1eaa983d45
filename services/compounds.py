"""ChemKG Explorer - Compound Role Queries.

Counts and lists the reactions a compound takes part in, broken down by the
role it plays: reactant, product, solvent, catalyst or agent. Compounds can be
selected by IRI (preferred) or by SMILES.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from config import Config
from .shared import (
    binding_int,
    binding_value,
    format_literal,
    prefix_declaration,
    select_bindings,
    validate_iri,
    InvalidArgument,
)

logger = logging.getLogger(__name__)

ROLES = ("hasReactant", "hasProduct", "hasSolvent", "hasCatalyst", "hasAgent")


@dataclass
class CompoundRoleStats:
    compound_iri: str
    smiles: Optional[str]
    label: Optional[str]
    total_roles: int
    as_reactant: int
    as_product: int
    as_solvent: int
    as_catalyst: int
    as_agent: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CompoundRoleReaction:
    role: str
    reaction_iri: str
    reaction_id: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _compound_selector(iri: Optional[str] = None, smiles: Optional[str] = None) -> str:
    if iri:
        return f"BIND(<{validate_iri(iri)}> AS ?compound)"
    if smiles and smiles.strip():
        return f"?compound ck:smiles {format_literal(smiles.strip())} ."
    raise InvalidArgument("Either a compound IRI or a SMILES string is required")


def _role_values() -> str:
    return "\n    ".join(f"ck:{role}" for role in ROLES)


def build_role_stats_query(iri: Optional[str] = None, smiles: Optional[str] = None) -> str:
    """Build the per-role reaction count query for one compound."""
    flags = "\n  ".join(
        f"BIND(IF(?prop = ck:{role}, 1, 0) AS ?is_{column})"
        for role, column in zip(ROLES, ("reactant", "product", "solvent", "catalyst", "agent"))
    )
    return f"""{prefix_declaration()}

SELECT ?compound ?smiles ?label
       (COUNT(DISTINCT ?reaction) AS ?total_roles)
       (SUM(?is_reactant) AS ?as_reactant)
       (SUM(?is_product) AS ?as_product)
       (SUM(?is_solvent) AS ?as_solvent)
       (SUM(?is_catalyst) AS ?as_catalyst)
       (SUM(?is_agent) AS ?as_agent)
WHERE {{
  {_compound_selector(iri, smiles)}
  OPTIONAL {{ ?compound ck:smiles ?smiles . }}
  OPTIONAL {{ ?compound ck:label ?label . }}

  ?reaction ?prop ?compound .
  VALUES ?prop {{
    {_role_values()}
  }}

  {flags}
}}
GROUP BY ?compound ?smiles ?label
"""


def build_role_reactions_query(iri: Optional[str] = None, smiles: Optional[str] = None, limit: int = 200) -> str:
    """Build the query listing a compound's reactions per role."""
    return f"""{prefix_declaration()}

SELECT DISTINCT ?role ?reaction ?reaction_id
WHERE {{
  {_compound_selector(iri, smiles)}

  ?reaction ?prop ?compound .
  VALUES ?prop {{
    {_role_values()}
  }}

  OPTIONAL {{ ?reaction ck:reactionId ?reaction_id . }}
  BIND(STRAFTER(STR(?prop), {format_literal(Config.CHEMKG_NAMESPACE)}) AS ?role)
}}
ORDER BY ?role ?reaction_id
LIMIT {limit}
"""


def get_compound_role_stats(iri: Optional[str] = None, smiles: Optional[str] = None) -> Optional[CompoundRoleStats]:
    """Return role statistics for a compound, or None if it takes part in no reaction.

    Raises:
        InvalidArgument: If neither a valid IRI nor a SMILES string is given.
        EngineQueryFailed: If GraphDB fails to answer.
    """
    query = build_role_stats_query(iri, smiles)
    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    if not bindings:
        return None

    b = bindings[0]
    return CompoundRoleStats(
        compound_iri=binding_value(b, "compound", iri or ""),
        smiles=binding_value(b, "smiles", smiles.strip() if smiles else None),
        label=binding_value(b, "label"),
        total_roles=binding_int(b, "total_roles"),
        as_reactant=binding_int(b, "as_reactant"),
        as_product=binding_int(b, "as_product"),
        as_solvent=binding_int(b, "as_solvent"),
        as_catalyst=binding_int(b, "as_catalyst"),
        as_agent=binding_int(b, "as_agent"),
    )


def get_compound_role_reactions(iri: Optional[str] = None, smiles: Optional[str] = None) -> List[CompoundRoleReaction]:
    """Return the reactions a compound takes part in, with its role in each."""
    query = build_role_reactions_query(iri, smiles)
    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)

    return [
        CompoundRoleReaction(
            role=binding_value(b, "role", ""),
            reaction_iri=binding_value(b, "reaction", ""),
            reaction_id=binding_value(b, "reaction_id"),
        )
        for b in bindings
    ]
