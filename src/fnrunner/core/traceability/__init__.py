"""
Rastreabilidade de runs do fnrunner: Manifest v1.

API pública:
    - RunManifest       → estrutura canônica do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito no Event Log
    - function_started  → início da execução de uma função
    - function_finished → conclusão bem-sucedida de uma função
    - function_failed   → falha de uma função
    - save_manifest / load_manifest → persistência JSON
"""

from .manifest import (
    RunManifest,
    add_event,
    create_manifest,
    function_failed,
    function_finished,
    function_started,
    load_manifest,
    save_manifest,
)

__all__ = [
    "RunManifest",
    "add_event",
    "create_manifest",
    "function_failed",
    "function_finished",
    "function_started",
    "load_manifest",
    "save_manifest",
]
