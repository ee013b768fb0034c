"""Filters in-process, sem container (fakes de teste e transformações locais)."""

from __future__ import annotations

from typing import Callable, List

from fnrunner.core.pipeline.types import Resource


class PassthroughFilter:
    """Devolve a lista recebida sem alterações."""

    def __init__(self, name: str = "passthrough"):
        self.name = name

    def apply(self, resources: List[Resource]) -> List[Resource]:
        return list(resources)

    def __str__(self) -> str:
        return self.name


class CallableFilter:
    """
    Adapta uma função `fn(resources) -> resources` ao protocolo Filter.

    `fn` pode mutar os Resources recebidos; o retorno substitui a lista.
    """

    def __init__(self, fn: Callable[[List[Resource]], List[Resource]], name: str = ""):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "callable")

    def apply(self, resources: List[Resource]) -> List[Resource]:
        return self.fn(resources)

    def __str__(self) -> str:
        return self.name
