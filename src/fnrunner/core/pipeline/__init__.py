"""
# Pipeline Core: fnrunner

Este pacote define os **contratos canônicos** compartilhados por todos os
estágios da run.

## Componentes

- **types**
  - `Resource`: documento + path de origem + índice de descoberta
  - `FunctionSpec`: definição de função descoberta
  - `InclusionPolicy`, `FunctionOrigin`, `FunctionScope`
  - `FilterStatus`, `FilterResult`

- **filter**
  - `Filter` (Protocol): `apply(resources) -> resources`
  - `FilterFactory`: `(image, home, config) -> Filter`

- **context**
  - `RunContext`: log estruturado e warnings da run

## Invariantes

- Filters não executam fora do controle do engine
- Estado compartilhado é sempre explícito e limitado a uma run
"""

from .context import RunContext
from .filter import Filter, FilterFactory
from .types import (
    FilterResult,
    FilterStatus,
    FunctionOrigin,
    FunctionScope,
    FunctionSpec,
    InclusionPolicy,
    Resource,
)

__all__ = [
    "Filter",
    "FilterFactory",
    "FilterResult",
    "FilterStatus",
    "FunctionOrigin",
    "FunctionScope",
    "FunctionSpec",
    "InclusionPolicy",
    "Resource",
    "RunContext",
]
