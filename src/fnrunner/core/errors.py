"""
fnrunner: Canonical Error Structures (v1)

Este módulo define o payload serializável de erro do fnrunner e o
catálogo de códigos estáveis usados no Manifest e no Event Log.

Erros devem ser:

- explícitos
- serializáveis
- rastreáveis até o estágio e o identificador ofensor
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import (
    FilterExecutionError,
    FnRunnerException,
    FunctionDiscoveryError,
    ResourceLoadError,
    ResourceWriteError,
    RunConfigurationError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FnRunnerErrorPayload:
    """
    Payload canônico de erro do fnrunner.

    Campos:
    - type: código estável do erro (não é texto livre)
    - stage: estágio da run em que a falha ocorreu
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados (path, image, index)
    - hint: ação sugerida ao operador
    """

    type: str
    stage: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

LOAD_ERROR = "LOAD_ERROR"
DISCOVERY_ERROR = "DISCOVERY_ERROR"
FILTER_EXECUTION_ERROR = "FILTER_EXECUTION_ERROR"
WRITE_ERROR = "WRITE_ERROR"
CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

_CODES = {
    ResourceLoadError: LOAD_ERROR,
    FunctionDiscoveryError: DISCOVERY_ERROR,
    FilterExecutionError: FILTER_EXECUTION_ERROR,
    ResourceWriteError: WRITE_ERROR,
    RunConfigurationError: CONFIGURATION_ERROR,
}

_DEFAULT_HINTS = {
    LOAD_ERROR: "Corrija o arquivo indicado (YAML válido, documentos do tipo mapa) e reexecute.",
    DISCOVERY_ERROR: "Declare a anotação local-config: \"true\" na definição da função ou remova a anotação de função.",
    FILTER_EXECUTION_ERROR: "Verifique a imagem da função e sua saída. Nenhum arquivo do pacote foi alterado.",
    WRITE_ERROR: "Verifique permissões e caminhos de destino. A escrita foi interrompida na primeira falha.",
    CONFIGURATION_ERROR: "Revise a configuração da run antes de reexecutar.",
}


def error_code_for(exc: BaseException) -> str:
    """Código estável associado à exceção (UNEXPECTED_ERROR para exceções externas)."""
    for cls, code in _CODES.items():
        if isinstance(exc, cls):
            return code
    return UNEXPECTED_ERROR


def error_payload_from_exception(exc: BaseException) -> FnRunnerErrorPayload:
    """Converte qualquer exceção em FnRunnerErrorPayload, sem expor stack trace."""
    code = error_code_for(exc)
    if isinstance(exc, FnRunnerException):
        return FnRunnerErrorPayload(
            type=code,
            stage=exc.stage,
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint or _DEFAULT_HINTS.get(code),
        )

    return FnRunnerErrorPayload(
        type=code,
        stage="run",
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o Event Log da run para diagnosticar a falha",
    )
