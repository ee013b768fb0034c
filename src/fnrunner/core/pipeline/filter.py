"""
Contrato canônico de Filter do fnrunner.

Um Filter é a unidade executável do pipeline: recebe a lista de
Resources e produz uma nova lista (possivelmente com documentos
adicionados, removidos ou alterados).

Responsabilidades de um Filter:
    - transformar a lista de Resources recebida
    - sinalizar falha levantando exceção

Princípios fundamentais:
    - Filters não conhecem o planner nem o engine
    - Filters não controlam ordem de execução nem escopo
    - Conformidade é garantida por duck typing (@runtime_checkable)

Variantes:
    - ContainerFilter (execução externa, produção)
    - PassthroughFilter / CallableFilter (in-process, testes e fakes)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

from .types import Resource


@runtime_checkable
class Filter(Protocol):
    """
    Contrato mínimo de um Filter.

    O retorno de `apply` substitui integralmente a lista de entrada no
    próximo estágio do pipeline. Retornar lista vazia é válido.
    """

    def apply(self, resources: List[Resource]) -> List[Resource]:
        """Transforma a lista de Resources; falhas são levantadas como exceção."""
        ...


# (image, home_path, config_document) -> Filter
FilterFactory = Callable[[str, str, Dict[str, Any]], Filter]
