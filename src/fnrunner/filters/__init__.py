"""
Implementações de Filter do fnrunner.

- ContainerFilter: executa a imagem da função em um container isolado,
  trocando um ResourceList YAML por stdin/stdout
- PassthroughFilter / CallableFilter: variantes in-process
"""

from .container import ContainerFilter, container_filter_factory, make_container_filter_factory
from .local import CallableFilter, PassthroughFilter

__all__ = [
    "CallableFilter",
    "ContainerFilter",
    "PassthroughFilter",
    "container_filter_factory",
    "make_container_filter_factory",
]
