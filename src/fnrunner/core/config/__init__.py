# src/fnrunner/core/config/__init__.py

"""
Camada de configuração do fnrunner.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (base + overrides locais)
    - Resolução via deep-merge determinístico
    - Construção do `RunConfig` imutável da run
    - Hash canônico para rastreabilidade no Manifest

Limites explícitos:
    - Não interpreta a configuração específica das funções
    - Não executa pipeline
"""

from .loader import load_config, load_run_config
from .settings import RunConfig

__all__ = ["RunConfig", "load_config", "load_run_config"]
