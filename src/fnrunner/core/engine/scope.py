"""
ScopeGuard: isolamento de funções por diretório.

Uma função de escopo PACKAGE só observa e só pode alterar os Resources
cujo path de origem está sob seu diretório home. Resources sem path
(sintetizados no meio do pipeline) estão sempre em escopo.

Política de recomposição:
    saída = Resources fora de escopo (ordem original, inalterados)
            + saída do Filter envolvido (na ordem devolvida por ele)

Funções de escopo GLOBAL recebem a lista completa, sem particionamento.
"""

from __future__ import annotations

from typing import List, Tuple

from fnrunner.core.pipeline.filter import Filter
from fnrunner.core.pipeline.types import FunctionSpec, Resource, normalize_path


def in_scope(resource: Resource, home: str) -> bool:
    """True se o Resource é visível para uma função com diretório `home`."""
    path = normalize_path(resource.path)
    home = normalize_path(home)
    if not path or not home:
        return True
    return path == home or path.startswith(home + "/")


def partition(resources: List[Resource], home: str) -> Tuple[List[Resource], List[Resource]]:
    """Separa (em escopo, fora de escopo) preservando a ordem relativa."""
    inside: List[Resource] = []
    outside: List[Resource] = []
    for resource in resources:
        (inside if in_scope(resource, home) else outside).append(resource)
    return inside, outside


class ScopedFilter:
    """Envolve um Filter restringindo-o à subárvore `home` do pacote."""

    def __init__(self, inner: Filter, home: str):
        self.inner = inner
        self.home = normalize_path(home)

    def apply(self, resources: List[Resource]) -> List[Resource]:
        inside, outside = partition(list(resources), self.home)
        result = self.inner.apply(inside)
        if not isinstance(result, list):
            raise TypeError("Filter.apply must return a list of Resource")
        return outside + result

    def __str__(self) -> str:
        return str(self.inner)

    def __repr__(self) -> str:
        return f"ScopedFilter({self.inner!r}, home={self.home!r})"


def scope_filter(spec: FunctionSpec, fltr: Filter) -> Filter:
    """Retorna o Filter bruto para funções globais ou um ScopedFilter caso contrário."""
    if spec.is_global:
        return fltr
    return ScopedFilter(fltr, spec.home)
