"""
fnrunner: Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas pelo core do fnrunner.

Taxonomia (uma classe por estágio):
- ResourceLoadError       → arquivo ilegível ou documento malformado
- FunctionDiscoveryError  → definição de função inválida ou sem marcador local
- FilterExecutionError    → falha ao executar um Filter da cadeia
- ResourceWriteError      → falha ao criar diretório, escrever ou remover arquivo
- RunConfigurationError   → configuração da run inconsistente

Regras:
- Toda falha é fatal e propaga como uma única exceção para o chamador.
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Não há retry automático em nenhum estágio.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional


@dataclass(frozen=True, eq=False)
class FnRunnerException(Exception):
    """Base class para exceções internas do fnrunner.

    Importante:
    - `details` sempre identifica o recurso ofensor (path, image ou index)
    - Mensagem deve ser curta e humana
    """

    stage: ClassVar[str] = "run"

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True, eq=False)
class ResourceLoadError(FnRunnerException):
    """Arquivo ilegível ou documento malformado durante a coleta."""

    stage: ClassVar[str] = "load"


@dataclass(frozen=True, eq=False)
class FunctionDiscoveryError(FnRunnerException):
    """Definição de função inválida (ex.: sem marcador local-config)."""

    stage: ClassVar[str] = "discovery"


@dataclass(frozen=True, eq=False)
class FilterExecutionError(FnRunnerException):
    """Falha de um Filter durante o pipeline."""

    stage: ClassVar[str] = "pipeline"


@dataclass(frozen=True, eq=False)
class ResourceWriteError(FnRunnerException):
    """Falha ao materializar o resultado em disco ou no stream de saída."""

    stage: ClassVar[str] = "write"


@dataclass(frozen=True, eq=False)
class RunConfigurationError(FnRunnerException):
    """Configuração inválida ou inconsistente para execução."""

    stage: ClassVar[str] = "configuration"
