# src/fnrunner/__init__.py
"""
fnrunner: orquestrador de funções para pacotes de configuração.

Um pacote de configuração é uma árvore de diretórios contendo documentos
YAML estruturados. Alguns desses documentos são *definições de função*:
pedidos de transformação autodescritivos, identificados por uma anotação
reservada, que precisam ser executados sobre o conjunto de documentos
antes que o pacote seja considerado renderizado.

Arquitetura em alto nível:
    - core.config       → carregamento, merge e hashing da configuração da run
    - core.pipeline     → tipos canônicos, protocolo de Filter e RunContext
    - core.io           → coleta de documentos e escrita do resultado
    - core.engine       → descoberta, ordenação, escopo e execução das funções
    - core.traceability → Manifest e Event Log da execução
    - filters           → implementações de Filter (container e in-process)

Limites explícitos:
    - Não valida semântica do conteúdo dos documentos
    - Não interpreta a configuração específica de cada função
    - Não oferece distribuição em rede nem interface de linha de comando
"""

from .core.config.settings import RunConfig
from .core.engine.engine import FunctionRunner, RunResult
from .core.pipeline.types import InclusionPolicy, Resource

__version__ = "0.1.0"

__all__ = [
    "FunctionRunner",
    "InclusionPolicy",
    "Resource",
    "RunConfig",
    "RunResult",
    "__version__",
]
