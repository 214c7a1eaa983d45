"""ChemKG Explorer - GraphDB Service Functions.

Query builders and service functions for the chemical reaction knowledge graph.

Module Structure:
    - shared: error taxonomy, literal escaping, GraphDB executor, binding helpers
    - pathways: multi-step pathway queries and reaction participants
    - search: scored compound search and filtered reaction search
    - compounds: per-role reaction statistics for a compound
    - stats: dashboard aggregate queries
    - mock_data: sample data served when GraphDB is unavailable

Usage Examples:
    >>> from services import build_multi_set_path_query
    >>> query = build_multi_set_path_query(["BrCCO"], ["C(C)S(=O)(=O)OCCBr"], 2)

    >>> from services import get_multi_set_paths, EngineQueryFailed
    >>> try:
    ...     paths = get_multi_set_paths(["BrCCO"], ["C(C)S(=O)(=O)OCCBr"], 2)
    ... except EngineQueryFailed as e:
    ...     print(f"GraphDB failed: {e.message}")
"""

from .shared import (
    ChemKGError,
    InvalidArgument,
    EngineQueryFailed,
    escape_literal,
    format_literal,
    execute_sparql_query,
    select_bindings,
    binding_value,
    binding_int,
    check_graphdb_health,
)

from .pathways import (
    NodeKind,
    ChainNode,
    Hop,
    PathSummary,
    DetailedPath,
    ReactionParticipant,
    plan_chain,
    build_multi_set_path_query,
    build_path_find_query,
    build_reaction_participants_query,
    get_multi_set_paths,
    find_paths,
    get_reaction_participants,
)

from .search import (
    CompoundSearchResult,
    ReactionSearchFilters,
    ReactionSearchResult,
    build_compound_search_query,
    build_reaction_search_query,
    search_compounds,
    search_reactions,
)

from .compounds import (
    CompoundRoleStats,
    CompoundRoleReaction,
    get_compound_role_stats,
    get_compound_role_reactions,
)

from .stats import (
    DashboardStats,
    TopSolvent,
    RecentReaction,
    PopularCompound,
    get_dashboard_stats,
    get_top_solvents,
    get_recent_reactions,
    get_popular_compounds,
)

__version__ = "1.0.0"

__all__ = [
    # Shared utilities
    'ChemKGError',
    'InvalidArgument',
    'EngineQueryFailed',
    'escape_literal',
    'format_literal',
    'execute_sparql_query',
    'select_bindings',
    'binding_value',
    'binding_int',
    'check_graphdb_health',

    # Pathways
    'NodeKind',
    'ChainNode',
    'Hop',
    'PathSummary',
    'DetailedPath',
    'ReactionParticipant',
    'plan_chain',
    'build_multi_set_path_query',
    'build_path_find_query',
    'build_reaction_participants_query',
    'get_multi_set_paths',
    'find_paths',
    'get_reaction_participants',

    # Search
    'CompoundSearchResult',
    'ReactionSearchFilters',
    'ReactionSearchResult',
    'build_compound_search_query',
    'build_reaction_search_query',
    'search_compounds',
    'search_reactions',

    # Compound roles
    'CompoundRoleStats',
    'CompoundRoleReaction',
    'get_compound_role_stats',
    'get_compound_role_reactions',

    # Dashboard statistics
    'DashboardStats',
    'TopSolvent',
    'RecentReaction',
    'PopularCompound',
    'get_dashboard_stats',
    'get_top_solvents',
    'get_recent_reactions',
    'get_popular_compounds',
]
