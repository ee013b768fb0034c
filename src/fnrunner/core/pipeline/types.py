"""
Tipos canônicos do pipeline do fnrunner.

Este módulo define as estruturas e enums fundamentais compartilhados por
collector, discovery, planner, engine e writer.

Componentes principais:
    - Resource        → um documento estruturado + path de origem + índice de descoberta
    - FunctionSpec    → uma definição de função descoberta (imutável)
    - FunctionOrigin  → implícita (dentro do pacote) ou explícita (fonte externa)
    - FunctionScope   → escopo global ou local ao diretório da função
    - InclusionPolicy → política tri-state de inclusão de funções implícitas
    - FilterStatus / FilterResult → registro imutável da execução de cada Filter

Invariantes:
    - Enums possuem valores textuais canônicos
    - O path de origem de um Resource é sempre relativo à raiz do pacote,
      em notação POSIX, ou vazio quando sintetizado por um Filter
    - O índice de descoberta serve apenas para desempate de ordenação

Limites explícitos:
    - Não executa Filters
    - Não lê nem escreve arquivos
"""

from __future__ import annotations

import copy
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, Optional


# Anotações reservadas (metadata.annotations)
FUNCTION_ANNOTATION = "config.kubernetes.io/function"
LOCAL_CONFIG_ANNOTATION = "config.kubernetes.io/local-config"
PATH_ANNOTATION = "config.kubernetes.io/path"
INDEX_ANNOTATION = "config.kubernetes.io/index"


def normalize_path(path: str) -> str:
    """Normaliza um path de origem em notação POSIX ("" permanece "")."""
    if not path:
        return ""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return "" if normalized == "." else normalized


def get_annotations(content: Any) -> Dict[str, Any]:
    """Retorna `metadata.annotations` de um documento ({} quando ausente ou inválido)."""
    if not isinstance(content, dict):
        return {}
    metadata = content.get("metadata")
    if not isinstance(metadata, dict):
        return {}
    annotations = metadata.get("annotations")
    if not isinstance(annotations, dict):
        return {}
    return annotations


@dataclass
class Resource:
    """
    Um documento estruturado do pacote.

    Campos:
        - content: documento (mapa) já parseado
        - path: path de origem relativo à raiz do pacote ("" se sintetizado)
        - index: índice de descoberta atribuído na coleta (-1 se sintetizado)

    Filters podem mutar `content` e `path` livremente; o path só muda
    quando o Filter o altera ou limpa explicitamente.
    """

    content: Dict[str, Any]
    path: str = ""
    index: int = -1

    @property
    def annotations(self) -> Dict[str, Any]:
        return get_annotations(self.content)

    @property
    def kind(self) -> str:
        value = self.content.get("kind") if isinstance(self.content, dict) else None
        return value if isinstance(value, str) else ""

    @property
    def name(self) -> str:
        metadata = self.content.get("metadata") if isinstance(self.content, dict) else None
        value = metadata.get("name") if isinstance(metadata, dict) else None
        return value if isinstance(value, str) else ""

    @property
    def namespace(self) -> str:
        metadata = self.content.get("metadata") if isinstance(self.content, dict) else None
        value = metadata.get("namespace") if isinstance(metadata, dict) else None
        return value if isinstance(value, str) else ""

    def copy(self) -> "Resource":
        return Resource(content=copy.deepcopy(self.content), path=self.path, index=self.index)


class FunctionOrigin(str, Enum):
    """Onde a definição de função foi descoberta."""

    IMPLICIT = "implicit"
    EXPLICIT = "explicit"


class FunctionScope(str, Enum):
    """
    Escopo de visibilidade de uma função.

    - GLOBAL: recebe a lista completa de Resources
    - PACKAGE: recebe apenas Resources sob seu diretório home
    """

    GLOBAL = "global"
    PACKAGE = "package"


class InclusionPolicy(str, Enum):
    """
    Política tri-state de inclusão de funções implícitas.

    Estados definidos:
        - DEFAULT: funções implícitas participam apenas quando nenhuma
          fonte explícita foi informada
        - FORCE_SKIP: funções implícitas nunca participam
        - FORCE_INCLUDE: funções implícitas sempre participam

    Decisões arquiteturais:
        - Informar uma fonte explícita equivale, por padrão, a abrir mão
          das funções embutidas no pacote
        - As três alternativas são explícitas em todos os pontos de chamada

    Invariantes:
        - A política não altera a exclusão dos documentos de função do
          stream de Resources; apenas decide se viram Filters
    """

    DEFAULT = "default"
    FORCE_SKIP = "force_skip"
    FORCE_INCLUDE = "force_include"

    def includes_implicit(self, has_explicit_sources: bool) -> bool:
        if self is InclusionPolicy.FORCE_SKIP:
            return False
        if self is InclusionPolicy.FORCE_INCLUDE:
            return True
        return not has_explicit_sources

    @classmethod
    def from_flag(cls, no_functions_from_input: Optional[bool]) -> "InclusionPolicy":
        """Converte o flag opcional "no functions from input" (None/True/False)."""
        if no_functions_from_input is None:
            return cls.DEFAULT
        return cls.FORCE_SKIP if no_functions_from_input else cls.FORCE_INCLUDE


@dataclass(frozen=True)
class FunctionSpec:
    """
    Definição de função descoberta no pacote ou em uma fonte explícita.

    Campos:
        - image: referência opaca da imagem do container
        - config: documento completo da função (payload + campos irmãos)
        - home: diretório da função relativo à raiz do pacote ("" = raiz)
        - origin: IMPLICIT ou EXPLICIT
        - scope: GLOBAL ou PACKAGE
        - index: índice de descoberta do documento de origem
        - path: path de origem do documento que declarou a função
        - source_index: posição da fonte explícita (None para implícitas)

    Invariantes:
        - O documento de origem nunca aparece no stream de Resources
        - `source_index` só é significativo quando origin == EXPLICIT
    """

    image: str
    config: Dict[str, Any] = field(default_factory=dict, compare=False)
    home: str = ""
    origin: FunctionOrigin = FunctionOrigin.IMPLICIT
    scope: FunctionScope = FunctionScope.PACKAGE
    index: int = 0
    path: str = ""
    source_index: Optional[int] = None

    @property
    def depth(self) -> int:
        """Profundidade do diretório home (raiz = 0)."""
        if not self.home:
            return 0
        return len(PurePosixPath(self.home).parts)

    @property
    def is_global(self) -> bool:
        return self.scope is FunctionScope.GLOBAL


class FilterStatus(str, Enum):
    """Estados finais da execução de um Filter."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FilterResult:
    """
    Resultado imutável da execução de um Filter da cadeia.

    Campos:
        - position: posição do Filter na cadeia ordenada
        - image: imagem da função executada
        - home: diretório home da função
        - status: estado final
        - resources_in / resources_out: contagens antes e depois do Filter
        - summary: resumo textual
    """

    position: int
    image: str
    home: str
    status: FilterStatus
    resources_in: int = 0
    resources_out: int = 0
    summary: str = ""

    @property
    def function_id(self) -> str:
        return f"{self.position}:{self.image}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "image": self.image,
            "home": self.home,
            "status": self.status.value,
            "summary": self.summary,
            "metrics": {
                "resources_in": self.resources_in,
                "resources_out": self.resources_out,
            },
        }
