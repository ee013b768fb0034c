# src/fnrunner/core/config/hashing.py
"""
Hashing canônico da configuração da run.

O hash identifica estruturalmente a configuração usada em uma execução
e é gravado no Manifest (`inputs.config_hash`).

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 em hexadecimal (64 caracteres)
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de um dicionário de configuração.

    Args:
        config (Dict[str, Any]): Configuração serializável.

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
