# src/fnrunner/core/config/merge.py
"""
Deep-merge da configuração da run (base + overrides locais).

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (ex.: `function_paths` nunca é concatenado)
    - None → sobrescrita direta (permite voltar o tri-state para "não definido")
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Args:
        base (Dict[str, Any]): Configuração base.
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Novo dicionário resultante do merge.

    Raises:
        ConfigTypeConflictError: Se uma chave possuir tipos incompatíveis
            entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        base_value = result.get(key)

        if key not in result or base_value is None or override_value is None:
            result[key] = deepcopy(override_value)
            continue

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
