"""
Engine do fnrunner: descoberta, ordenação, escopo e execução das funções.

API pública:
    - discover / Discovery          → separação entre funções e Resources
    - plan_functions                → InclusionPolicy + ordenação
    - ScopedFilter / scope_filter   → isolamento por diretório home
    - build_filter_chain / Pipeline → construção e execução da cadeia
    - FunctionRunner / RunResult    → orquestração completa de uma run
"""

from .discovery import Discovery, discover, function_spec_from_resource
from .engine import (
    ChainLink,
    FilterChain,
    FunctionRunner,
    Pipeline,
    RunResult,
    build_filter_chain,
)
from .planner import MisplacedFunctionError, plan_functions
from .scope import ScopedFilter, in_scope, partition, scope_filter

__all__ = [
    "ChainLink",
    "Discovery",
    "FilterChain",
    "FunctionRunner",
    "MisplacedFunctionError",
    "Pipeline",
    "RunResult",
    "ScopedFilter",
    "build_filter_chain",
    "discover",
    "function_spec_from_resource",
    "in_scope",
    "partition",
    "plan_functions",
    "scope_filter",
]
