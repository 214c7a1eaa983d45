"""ChemKG Explorer - Pathway Queries.

Builds and runs the queries behind the pathway explorer: which target compounds
can be reached from a set of start compounds within a bounded number of
reaction steps.

A chain of length L is a sequence of positions 0..L. Position 0 is a start
compound, position L a target compound, and positions 1..L-1 are unnamed
intermediates. Hop i links position i-1 to position i through reaction i, which
consumes the compound at i-1 (ck:hasReactant) and yields the compound at i
(ck:hasProduct). The chain is planned as a list of Hop descriptors first and
only then rendered to SPARQL text.

Query Builders:
    - build_multi_set_path_query(): detailed chains of length 1..max_steps whose
      first reaction consumes every start and whose last reaction yields every
      target
    - build_path_find_query(): (start, target, steps) reachability summary
    - build_reaction_participants_query(): participants of one reaction

Service Functions:
    - get_multi_set_paths(): run the detailed query, return DetailedPath rows
    - find_paths(): run the summary query, return PathSummary rows
    - get_reaction_participants(): run the participants query

Result ordering of the detailed query is left to GraphDB; sort client-side.
"""

import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from config import Config
from .shared import (
    InvalidArgument,
    binding_int,
    binding_value,
    format_literal,
    format_literal_list,
    prefix_declaration,
    select_bindings,
)

logger = logging.getLogger(__name__)

REACTANT = "ck:hasReactant"
PRODUCT = "ck:hasProduct"
IDENTIFIER = "ck:smiles"
REACTION_ID = "ck:reactionId"

PARTICIPANT_ROLES = ("hasReactant", "hasProduct", "hasCatalyst", "hasSolvent", "hasAgent")


class NodeKind(Enum):
    START = "start"
    INTERMEDIATE = "intermediate"
    TARGET = "target"


@dataclass(frozen=True)
class ChainNode:
    """A compound position in a reaction chain."""

    position: int
    kind: NodeKind

    @property
    def variable(self) -> str:
        if self.kind is NodeKind.START:
            return "?start_node"
        if self.kind is NodeKind.TARGET:
            return "?target_node"
        return f"?mid_{self.position}"

    @property
    def identifier_variable(self) -> str:
        if self.kind is NodeKind.START:
            return "?start_identifier"
        if self.kind is NodeKind.TARGET:
            return "?target_identifier"
        return f"?mid_{self.position}_identifier"


@dataclass(frozen=True)
class Hop:
    """Reaction ``index`` consumes ``source`` and yields ``product``."""

    index: int
    source: ChainNode
    product: ChainNode

    @property
    def reaction_variable(self) -> str:
        return f"?reaction_{self.index}"

    @property
    def reaction_id_variable(self) -> str:
        return f"?reaction_{self.index}_id"


def plan_chain(length: int) -> List[Hop]:
    """Plan the hops of a chain with ``length`` reactions.

    Example:
        >>> [(h.source.variable, h.product.variable) for h in plan_chain(2)]
        [('?start_node', '?mid_1'), ('?mid_1', '?target_node')]
    """
    if length < 1:
        raise InvalidArgument("Chain length must be >= 1")

    nodes = []
    for position in range(length + 1):
        if position == 0:
            kind = NodeKind.START
        elif position == length:
            kind = NodeKind.TARGET
        else:
            kind = NodeKind.INTERMEDIATE
        nodes.append(ChainNode(position, kind))

    return [Hop(index, nodes[index - 1], nodes[index]) for index in range(1, length + 1)]


def _validate_path_arguments(starts: Sequence[str], targets: Sequence[str], max_steps: int, caller: str) -> None:
    if not starts:
        raise InvalidArgument(f"{caller}: starts must not be empty")
    if not targets:
        raise InvalidArgument(f"{caller}: targets must not be empty")
    if isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps < 1:
        raise InvalidArgument(f"{caller}: max_steps must be an integer >= 1, got {max_steps!r}")


def _render_branch(hops: List[Hop], start_values_in: str) -> str:
    lines = []
    for hop in hops:
        lines.append(f"{hop.reaction_variable} {REACTANT} {hop.source.variable} ;")
        lines.append(f"    {PRODUCT} {hop.product.variable} .")
        if hop.source.kind is NodeKind.START:
            lines.append(f"{hop.source.variable} {IDENTIFIER} {hop.source.identifier_variable} .")
            lines.append(f"FILTER({hop.source.identifier_variable} IN ({start_values_in}))")
        if hop.product.kind is NodeKind.INTERMEDIATE:
            lines.append(f"{hop.product.variable} {IDENTIFIER} {hop.product.identifier_variable} .")

    for hop in hops:
        lines.append(f"OPTIONAL {{ {hop.reaction_variable} {REACTION_ID} {hop.reaction_id_variable} }}")

    lines.append(f"BIND({hops[-1].reaction_variable} AS ?reaction_last)")
    lines.append(f"BIND({len(hops)} AS ?step_count)")

    body = "\n".join(f"    {line}" for line in lines)
    return f"  {{\n    # {len(hops)}-step chain\n{body}\n  }}"


def build_multi_set_path_query(starts: Sequence[str], targets: Sequence[str], max_steps: int) -> str:
    """Build the detailed multi-step pathway query.

    Emits one UNION branch per chain length 1..max_steps. Each branch starts at a
    compound whose identifier is in ``starts`` and ends at ``?target_node``,
    whose identifier is in ``targets``. Two grouped subqueries then require that
    the first reaction consumes *all* of ``starts`` and the last reaction yields
    *all* of ``targets``.

    Args:
        starts (Sequence[str]): Start compound identifiers (SMILES).
        targets (Sequence[str]): Target compound identifiers (SMILES).
        max_steps (int): Inclusive upper bound on chain length.

    Returns:
        str: A SELECT DISTINCT query with columns ?reaction_i and ?reaction_i_id
            for i in 1..max_steps, ?mid_i_identifier for i in 1..max_steps-1,
            ?target_identifier and ?step_count.

    Raises:
        InvalidArgument: If starts or targets is empty or max_steps < 1.
    """
    _validate_path_arguments(starts, targets, max_steps, "build_multi_set_path_query")

    start_values_in = format_literal_list(starts, ", ")
    target_values_in = format_literal_list(targets, ", ")
    target_values = format_literal_list(targets)
    start_count = len(set(starts))
    target_count = len(set(targets))

    branches = [_render_branch(plan_chain(length), start_values_in) for length in range(1, max_steps + 1)]
    union_block = "\n  UNION\n".join(branches)

    longest = plan_chain(max_steps)
    select_vars = [v for hop in longest for v in (hop.reaction_variable, hop.reaction_id_variable)]
    select_vars += [hop.product.identifier_variable for hop in longest[:-1]]
    select_vars += ["?target_identifier", "?step_count"]

    return f"""{prefix_declaration()}

SELECT DISTINCT {' '.join(select_vars)}
WHERE {{
  VALUES ?target_identifier {{ {target_values} }}
  ?target_node {IDENTIFIER} ?target_identifier .

{union_block}

  # first reaction consumes every start compound
  {{
    SELECT ?reaction_1
    WHERE {{
      ?reaction_1 {REACTANT} ?start_match_node .
      ?start_match_node {IDENTIFIER} ?start_match .
      FILTER(?start_match IN ({start_values_in}))
    }}
    GROUP BY ?reaction_1
    HAVING (COUNT(DISTINCT ?start_match) = {start_count})
  }}

  # last reaction yields every target compound
  {{
    SELECT ?reaction_last
    WHERE {{
      ?reaction_last {PRODUCT} ?target_match_node .
      ?target_match_node {IDENTIFIER} ?target_match .
      FILTER(?target_match IN ({target_values_in}))
    }}
    GROUP BY ?reaction_last
    HAVING (COUNT(DISTINCT ?target_match) = {target_count})
  }}
}}
"""


def build_path_find_query(starts: Sequence[str], targets: Sequence[str], max_steps: int,
                          limit: Optional[int] = None) -> str:
    """Build the reachability summary query.

    Each branch expresses an L-step chain as the property path
    ``(^ck:hasReactant/ck:hasProduct)`` repeated L times.

    Raises:
        InvalidArgument: Same conditions as build_multi_set_path_query(), or a
            limit below 1.
    """
    _validate_path_arguments(starts, targets, max_steps, "build_path_find_query")
    limit = Config.PATH_RESULT_LIMIT if limit is None else limit
    if limit < 1:
        raise InvalidArgument("build_path_find_query: limit must be >= 1")

    step = f"(^{REACTANT}/{PRODUCT})"
    branches = []
    for length in range(1, max_steps + 1):
        path = "/".join([step] * length)
        branches.append(
            f"  {{\n    ?start_node {path} ?target_node .\n    BIND({length} AS ?step_count)\n  }}"
        )
    union_block = "\n  UNION\n".join(branches)

    return f"""{prefix_declaration()}

SELECT DISTINCT ?start_identifier ?target_identifier ?step_count
WHERE {{
  VALUES ?start_identifier {{ {format_literal_list(starts)} }}
  VALUES ?target_identifier {{ {format_literal_list(targets)} }}

  ?start_node {IDENTIFIER} ?start_identifier .
  ?target_node {IDENTIFIER} ?target_identifier .

{union_block}
}}
ORDER BY ?step_count
LIMIT {limit}
"""


def build_reaction_participants_query(reaction_id: str) -> str:
    """Build the query listing the participants and patent of one reaction."""
    if not reaction_id or not reaction_id.strip():
        raise InvalidArgument("reaction_id must not be empty")

    roles = "\n    ".join(f"ck:{role}" for role in PARTICIPANT_ROLES)
    return f"""{prefix_declaration()}

SELECT ?role ?compound_identifier ?compound_label ?patent ?patent_id
WHERE {{
  ?reaction {REACTION_ID} {format_literal(reaction_id.strip())} .

  OPTIONAL {{
    ?reaction ck:documentedIn ?patent .
    OPTIONAL {{ ?patent ck:hasPatentId ?patent_id }}
  }}

  ?reaction ?prop ?compound .
  VALUES ?prop {{
    {roles}
  }}
  BIND(STRAFTER(STR(?prop), {format_literal(Config.CHEMKG_NAMESPACE)}) AS ?role)

  OPTIONAL {{ ?compound {IDENTIFIER} ?compound_identifier }}
  OPTIONAL {{ ?compound ck:label ?compound_label }}
}}
ORDER BY ?role ?compound_identifier
"""


@dataclass
class PathSummary:
    start_identifier: str
    target_identifier: str
    steps: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DetailedPath:
    """One concrete reaction chain returned by the detailed pathway query.

    ``start_identifiers`` is the input start set, not a per-row binding: the
    first reaction consumes all of them.
    """

    start_identifiers: List[str]
    target_identifier: str
    intermediates: List[str] = field(default_factory=list)
    reaction_ids: List[Optional[str]] = field(default_factory=list)
    reaction_iris: List[Optional[str]] = field(default_factory=list)
    step_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReactionParticipant:
    role: str
    smiles: Optional[str] = None
    label: Optional[str] = None
    patent_iri: Optional[str] = None
    patent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clean_identifiers(values: Sequence[str]) -> List[str]:
    """Trim identifiers and drop blanks and repeats, keeping first-seen order."""
    cleaned = []
    for value in values or []:
        value = (value or "").strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


def _row_step_count(binding: Dict[str, Any], max_steps: int) -> int:
    step_count = binding_int(binding, "step_count", 0)
    if 1 <= step_count <= max_steps:
        return step_count

    # Fall back to the highest hop with a bound reaction
    step_count = 0
    for i in range(1, max_steps + 1):
        if f"reaction_{i}" in binding or f"reaction_{i}_id" in binding:
            step_count = i
    return step_count


def parse_detailed_paths(bindings: List[Dict[str, Any]], starts: List[str], targets: List[str],
                         max_steps: int) -> List[DetailedPath]:
    """Turn detailed pathway result rows into DetailedPath objects.

    Rows without any bound reaction are dropped. Intermediates are read
    positionally (?mid_1_identifier, ?mid_2_identifier, ...) up to the row's
    step count minus one.
    """
    paths = []
    for binding in bindings:
        step_count = _row_step_count(binding, max_steps)
        if step_count == 0:
            logger.debug(f"Skipping path row without reactions: {binding}")
            continue

        target = binding_value(binding, "target_identifier", targets[0] if len(targets) == 1 else "")
        intermediates = [
            binding_value(binding, f"mid_{i}_identifier")
            for i in range(1, step_count)
            if binding_value(binding, f"mid_{i}_identifier")
        ]
        paths.append(DetailedPath(
            start_identifiers=list(starts),
            target_identifier=target,
            intermediates=intermediates,
            reaction_ids=[binding_value(binding, f"reaction_{i}_id") for i in range(1, step_count + 1)],
            reaction_iris=[binding_value(binding, f"reaction_{i}") for i in range(1, step_count + 1)],
            step_count=step_count,
        ))
    return paths


def keep_shortest_paths(paths: List[DetailedPath]) -> List[DetailedPath]:
    """Keep only the paths with the minimal step count for their target."""
    best = {}
    for path in paths:
        current = best.get(path.target_identifier)
        if current is None or path.step_count < current:
            best[path.target_identifier] = path.step_count
    return [p for p in paths if p.step_count == best[p.target_identifier]]


def get_multi_set_paths(starts: Sequence[str], targets: Sequence[str], max_steps: int,
                        shortest_only: bool = False) -> List[DetailedPath]:
    """Find reaction chains from a start set to a target set.

    Args:
        starts (Sequence[str]): Start identifiers; blanks are ignored.
        targets (Sequence[str]): Target identifiers; blanks are ignored.
        max_steps (int): Maximum chain length.
        shortest_only (bool): Keep only the shortest chains per target.

    Returns:
        List[DetailedPath]: Chains sorted by step count, then target.

    Raises:
        InvalidArgument: On empty inputs or max_steps < 1.
        EngineQueryFailed: If GraphDB fails to answer.
    """
    starts = clean_identifiers(starts)
    targets = clean_identifiers(targets)
    query = build_multi_set_path_query(starts, targets, max_steps)

    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    paths = parse_detailed_paths(bindings, starts, targets, max_steps)
    if shortest_only:
        paths = keep_shortest_paths(paths)

    paths.sort(key=lambda p: (p.step_count, p.target_identifier))
    logger.info(f"Found {len(paths)} pathways from {len(starts)} starts to {len(targets)} targets "
                f"within {max_steps} steps")
    return paths


def find_paths(starts: Sequence[str], targets: Sequence[str], max_steps: int,
               shortest_only: bool = False) -> List[PathSummary]:
    """Return one row per reachable (start, target, steps) combination.

    With ``shortest_only`` only the minimum-steps row per (start, target) pair
    is kept, sorted by steps.
    """
    starts = clean_identifiers(starts)
    targets = clean_identifiers(targets)
    query = build_path_find_query(starts, targets, max_steps)

    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)
    rows = [
        PathSummary(
            start_identifier=binding_value(b, "start_identifier", ""),
            target_identifier=binding_value(b, "target_identifier", ""),
            steps=binding_int(b, "step_count"),
        )
        for b in bindings
    ]

    if not shortest_only:
        return rows

    best_by_pair = {}
    for row in rows:
        key = (row.start_identifier, row.target_identifier)
        existing = best_by_pair.get(key)
        if existing is None or row.steps < existing.steps:
            best_by_pair[key] = row

    return sorted(best_by_pair.values(), key=lambda r: r.steps)


def get_reaction_participants(reaction_id: str) -> List[ReactionParticipant]:
    """Return the participants of a reaction looked up by its reaction id."""
    query = build_reaction_participants_query(reaction_id)
    bindings = select_bindings(query, timeout_ms=Config.PATHWAY_TIMEOUT_MS)

    return [
        ReactionParticipant(
            role=binding_value(b, "role", ""),
            smiles=binding_value(b, "compound_identifier"),
            label=binding_value(b, "compound_label"),
            patent_iri=binding_value(b, "patent"),
            patent_id=binding_value(b, "patent_id"),
        )
        for b in bindings
    ]
