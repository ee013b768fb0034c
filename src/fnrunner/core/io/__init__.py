"""
Leitura e escrita de pacotes.

- collector → ResourceCollector (pacote + fontes explícitas)
- writer    → Writer/Sink (in-place ou stream combinado)
- documents → codec YAML multi-documento compartilhado
"""

from .collector import collect_package, collect_sources
from .writer import WriteSummary, write_in_place, write_stream

__all__ = [
    "WriteSummary",
    "collect_package",
    "collect_sources",
    "write_in_place",
    "write_stream",
]
