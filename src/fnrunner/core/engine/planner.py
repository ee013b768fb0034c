# src/fnrunner/core/engine/planner.py
"""
Planejador da ordem de execução das funções (FunctionSorter).

Ordem produzida:
    1. funções implícitas, quando a InclusionPolicy as admite, em ordem
       decrescente de profundidade do diretório home (mais aninhadas primeiro);
       empates resolvidos pelo índice de descoberta crescente
    2. funções explícitas, sempre por último, na ordem das fontes informadas;
       empates dentro de uma mesma fonte resolvidos pelo índice de descoberta

Decisões arquiteturais:
    - Funções mais profundas rodam antes das funções ancestrais
    - Funções explícitas são pós-processamento do pipeline
    - A ordenação é estável e determinística para a mesma entrada

Limites explícitos:
    - Não executa Filters
    - Não interage com o filesystem
"""

from __future__ import annotations

from typing import Iterable, List

from fnrunner.core.pipeline.types import FunctionOrigin, FunctionSpec, InclusionPolicy


class MisplacedFunctionError(ValueError):
    """
    Exceção levantada quando uma FunctionSpec aparece no grupo errado
    (ex.: função explícita sem `source_index` ou implícita no grupo explícito).
    """


def plan_functions(
    implicit: Iterable[FunctionSpec],
    explicit: Iterable[FunctionSpec],
    *,
    policy: InclusionPolicy = InclusionPolicy.DEFAULT,
    has_explicit_sources: bool = False,
) -> List[FunctionSpec]:
    """
    Produz a sequência ordenada de funções a executar.

    Args:
        implicit: funções descobertas dentro da raiz do pacote.
        explicit: funções descobertas nas fontes explícitas.
        policy: política tri-state de inclusão das implícitas.
        has_explicit_sources: se alguma fonte explícita foi informada
            (mesmo que não contenha funções).

    Returns:
        List[FunctionSpec]: implícitas incluídas (profundidade decrescente)
        seguidas das explícitas (ordem das fontes).

    Raises:
        MisplacedFunctionError: função em grupo incompatível com sua origem.
    """
    implicit_list = list(implicit)
    explicit_list = list(explicit)

    for spec in implicit_list:
        if spec.origin is not FunctionOrigin.IMPLICIT:
            raise MisplacedFunctionError(f"Function '{spec.image}' is not implicit")
    for spec in explicit_list:
        if spec.origin is not FunctionOrigin.EXPLICIT or spec.source_index is None:
            raise MisplacedFunctionError(
                f"Function '{spec.image}' is not explicit or lacks a source index"
            )

    ordered: List[FunctionSpec] = []
    if policy.includes_implicit(has_explicit_sources):
        ordered.extend(sorted(implicit_list, key=lambda s: (-s.depth, s.index)))
    ordered.extend(sorted(explicit_list, key=lambda s: (s.source_index, s.index)))
    return ordered
