"""
Descoberta de funções (FunctionDiscoverer).

Este módulo inspeciona os documentos carregados em busca da anotação de
função e do marcador local-config, separando-os em:

    - Resources ordinários do pacote (seguem para o pipeline)
    - funções implícitas (declaradas dentro da raiz do pacote)
    - funções explícitas (declaradas em fontes externas informadas)

Regras:
    - Documento com anotação de função e marcador local-config → FunctionSpec
    - Documento com anotação de função sem o marcador → FunctionDiscoveryError
    - Documentos de função nunca voltam ao stream de Resources, mesmo quando
      a InclusionPolicy descarta a função
    - Documentos ordinários em fontes explícitas são ignorados
    - O diretório home é o diretório do path de origem, sempre interpretado
      como relativo à raiz do pacote

Formato do payload da anotação de função (YAML em string ou mapa):

    container:
      image: gcr.io/example.com/image:v1.0.0
    scope: global   # opcional; "package" por padrão
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import yaml  # PyYAML

from fnrunner.core.exceptions import FunctionDiscoveryError
from fnrunner.core.pipeline.types import (
    FUNCTION_ANNOTATION,
    LOCAL_CONFIG_ANNOTATION,
    FunctionOrigin,
    FunctionScope,
    FunctionSpec,
    Resource,
)


@dataclass(frozen=True)
class Discovery:
    """Resultado da descoberta sobre o pacote e as fontes explícitas."""

    resources: List[Resource] = field(default_factory=list)
    implicit: List[FunctionSpec] = field(default_factory=list)
    explicit: List[FunctionSpec] = field(default_factory=list)
    function_documents: List[Resource] = field(default_factory=list)
    ignored: List[Resource] = field(default_factory=list)


def is_function(resource: Resource) -> bool:
    return FUNCTION_ANNOTATION in resource.annotations


def is_local_config(resource: Resource) -> bool:
    value = resource.annotations.get(LOCAL_CONFIG_ANNOTATION)
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _function_payload(resource: Resource) -> Dict[str, Any]:
    raw = resource.annotations.get(FUNCTION_ANNOTATION)
    if isinstance(raw, str):
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise FunctionDiscoveryError(
                message=f"invalid function annotation in {resource.path or '<unknown>'}: {e}",
                details={"path": resource.path, "index": resource.index},
            ) from e
    else:
        payload = raw

    if not isinstance(payload, dict):
        raise FunctionDiscoveryError(
            message=f"function annotation must be a mapping in {resource.path or '<unknown>'}",
            details={"path": resource.path, "index": resource.index},
        )
    return payload


def _function_image(resource: Resource, payload: Dict[str, Any]) -> str:
    container = payload.get("container")
    image = container.get("image") if isinstance(container, dict) else None
    if not isinstance(image, str) or not image.strip():
        raise FunctionDiscoveryError(
            message=f"function in {resource.path or '<unknown>'} does not declare container.image",
            details={"path": resource.path, "index": resource.index},
        )
    return image.strip()


def _function_scope(resource: Resource, payload: Dict[str, Any], global_scope: bool) -> FunctionScope:
    declared = payload.get("scope", FunctionScope.PACKAGE.value)
    try:
        scope = FunctionScope(declared)
    except ValueError as e:
        raise FunctionDiscoveryError(
            message=f"unknown function scope {declared!r} in {resource.path or '<unknown>'}",
            details={"path": resource.path, "index": resource.index},
        ) from e
    return FunctionScope.GLOBAL if global_scope else scope


def function_spec_from_resource(
    resource: Resource,
    *,
    origin: FunctionOrigin,
    source_index: Optional[int] = None,
    global_scope: bool = False,
) -> FunctionSpec:
    """
    Constrói a FunctionSpec de um documento de função.

    Raises:
        FunctionDiscoveryError: marcador local-config ausente ou payload inválido.
    """
    if not is_local_config(resource):
        raise FunctionDiscoveryError(
            message=(
                f"function declared in {resource.path or '<unknown>'} "
                f"is missing the {LOCAL_CONFIG_ANNOTATION} annotation"
            ),
            details={"path": resource.path, "index": resource.index},
        )

    payload = _function_payload(resource)
    return FunctionSpec(
        image=_function_image(resource, payload),
        config=resource.copy().content,
        home=posixpath.dirname(resource.path),
        origin=origin,
        scope=_function_scope(resource, payload, global_scope),
        index=resource.index,
        path=resource.path,
        source_index=source_index if origin is FunctionOrigin.EXPLICIT else None,
    )


def discover(
    package_resources: Sequence[Resource],
    sources: Sequence[Sequence[Resource]] = (),
    *,
    global_scope: bool = False,
) -> Discovery:
    """
    Separa funções de Resources ordinários.

    Args:
        package_resources: documentos coletados sob a raiz do pacote.
        sources: documentos de cada fonte explícita, na ordem informada.
        global_scope: override que torna toda função global.

    Returns:
        Discovery com Resources ordinários, funções implícitas e explícitas.

    Raises:
        FunctionDiscoveryError: definição de função inválida.
    """
    discovery = Discovery()

    for resource in package_resources:
        if not is_function(resource):
            discovery.resources.append(resource)
            continue
        discovery.implicit.append(
            function_spec_from_resource(
                resource, origin=FunctionOrigin.IMPLICIT, global_scope=global_scope
            )
        )
        discovery.function_documents.append(resource)

    for source_index, source in enumerate(sources):
        for resource in source:
            if not is_function(resource):
                discovery.ignored.append(resource)
                continue
            discovery.explicit.append(
                function_spec_from_resource(
                    resource,
                    origin=FunctionOrigin.EXPLICIT,
                    source_index=source_index,
                    global_scope=global_scope,
                )
            )

    return discovery
