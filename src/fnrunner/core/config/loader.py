# src/fnrunner/core/config/loader.py
"""
Loader da configuração da run.

A configuração é resolvida a partir de:
    - um arquivo base (obrigatório)
    - um arquivo local de overrides (opcional)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar o tipo raiz (dict)
    - Resolver a configuração final via deep-merge determinístico
    - Construir o `RunConfig` imutável consumido pelo orquestrador

Invariantes:
    - O arquivo base é obrigatório
    - Overrides nunca mutam a base
    - A mesma entrada sempre produz a mesma configuração final
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .errors import (
    ConfigNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge
from .settings import RunConfig


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        ConfigNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva como dicionário.

    Política de resolução:
        - O arquivo base é obrigatório
        - O arquivo local é opcional; quando ausente em disco é ignorado
        - Quando presente, o local sempre tem prioridade sobre a base
    """
    effective = _load_file(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return effective


def load_run_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> RunConfig:
    """
    Carrega a configuração e constrói o `RunConfig` da run.

    Raises:
        ConfigNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError,
        InvalidConfigValueError.
    """
    return RunConfig.from_mapping(load_config(defaults_path=defaults_path, local_path=local_path))
