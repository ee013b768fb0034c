"""
Codec YAML de documentos do pacote.

Um arquivo do pacote pode conter vários documentos separados por `---`.
Este módulo concentra o parse e a serialização desses streams para que
collector, writer e ContainerFilter usem exatamente a mesma política.

Política (v1):
    - Parse com `yaml.safe_load_all`; documentos vazios são descartados
    - Todo documento não vazio deve ser um mapa
    - Serialização com `yaml.safe_dump_all`, preservando a ordem das chaves
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import yaml  # PyYAML


DOCUMENT_SUFFIXES = frozenset({".yaml", ".yml"})


class MalformedDocumentError(ValueError):
    """Documento YAML sintaticamente inválido ou que não é um mapa."""


def parse_documents(text: str) -> List[Dict[str, Any]]:
    """
    Converte um stream YAML em uma lista de documentos (mapas).

    Raises:
        MalformedDocumentError: YAML inválido ou documento não-mapa.
    """
    try:
        raw = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"invalid YAML: {e}") from e

    documents: List[Dict[str, Any]] = []
    for position, doc in enumerate(raw):
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise MalformedDocumentError(
                f"document {position} must be a mapping, got {type(doc).__name__}"
            )
        documents.append(doc)
    return documents


def dump_documents(documents: Iterable[Dict[str, Any]]) -> str:
    """Serializa documentos em um único stream YAML (`---` entre documentos)."""
    docs = list(documents)
    if not docs:
        return ""
    return yaml.safe_dump_all(
        docs,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
