"""
ContainerFilter: execução de uma função em container.

Protocolo de troca (stdin/stdout, YAML):

    apiVersion: config.kubernetes.io/v1
    kind: ResourceList
    items: [...]           # Resources em escopo
    functionConfig: {...} # documento completo da função

Antes do envio, cada item recebe as anotações de path e índice de
origem; na volta, essas anotações são lidas para restaurar `path` e
`index` e então removidas do conteúdo. Itens devolvidos sem anotação de
path são tratados como sintetizados.

A saída pode ser um ResourceList ou um stream simples de documentos.

O container roda sem rede, como usuário sem privilégios e é removido ao
final (`--rm`).
"""

from __future__ import annotations

import copy
import subprocess
from typing import Any, Dict, List, Optional

from fnrunner.core.exceptions import FilterExecutionError
from fnrunner.core.io.documents import MalformedDocumentError, dump_documents, parse_documents
from fnrunner.core.pipeline.filter import FilterFactory
from fnrunner.core.pipeline.types import INDEX_ANNOTATION, PATH_ANNOTATION, Resource

RESOURCE_LIST_API_VERSION = "config.kubernetes.io/v1"
RESOURCE_LIST_KIND = "ResourceList"

DEFAULT_ENGINE = "docker"


def _with_origin(resource: Resource) -> Dict[str, Any]:
    content = copy.deepcopy(resource.content)
    metadata = content.setdefault("metadata", {})
    if not isinstance(metadata, dict):
        return content
    annotations = metadata.setdefault("annotations", {})
    if not isinstance(annotations, dict):
        return content
    if resource.path:
        annotations[PATH_ANNOTATION] = resource.path
    if resource.index >= 0:
        annotations[INDEX_ANNOTATION] = str(resource.index)
    return content


def _restore_origin(content: Dict[str, Any]) -> Resource:
    metadata = content.get("metadata")
    annotations = metadata.get("annotations") if isinstance(metadata, dict) else None
    if not isinstance(annotations, dict):
        return Resource(content=content)

    path = annotations.pop(PATH_ANNOTATION, "")
    raw_index = annotations.pop(INDEX_ANNOTATION, None)
    if not annotations:
        del metadata["annotations"]
    if not metadata:
        del content["metadata"]

    try:
        index = int(raw_index) if raw_index is not None else -1
    except (TypeError, ValueError):
        index = -1
    return Resource(content=content, path=str(path or ""), index=index)


class ContainerFilter:
    """
    Filter de produção: executa `image` em um container.

    Args:
        image: referência da imagem (opaca).
        config: documento completo da função, enviado como `functionConfig`.
        home: diretório home da função (apenas informativo).
        engine: binário do container engine (`docker`, `podman`, ...).
        timeout: limite em segundos para a execução (None = sem limite).
    """

    def __init__(
        self,
        image: str,
        config: Optional[Dict[str, Any]] = None,
        home: str = "",
        *,
        engine: str = DEFAULT_ENGINE,
        timeout: Optional[float] = None,
    ):
        self.image = image
        self.config = config or {}
        self.home = home
        self.engine = engine
        self.timeout = timeout

    def __str__(self) -> str:
        return self.image

    def __repr__(self) -> str:
        return f"ContainerFilter(image={self.image!r}, home={self.home!r})"

    def build_command(self) -> List[str]:
        """Monta o argv do container engine."""
        return [
            self.engine,
            "run",
            "--rm",
            "-i",
            "--network",
            "none",
            "--user",
            "nobody",
            "--security-opt=no-new-privileges",
            self.image,
        ]

    def encode_input(self, resources: List[Resource]) -> str:
        """Serializa o ResourceList enviado ao container."""
        resource_list = {
            "apiVersion": RESOURCE_LIST_API_VERSION,
            "kind": RESOURCE_LIST_KIND,
            "items": [_with_origin(r) for r in resources],
            "functionConfig": copy.deepcopy(self.config),
        }
        return dump_documents([resource_list])

    def decode_output(self, text: str) -> List[Resource]:
        """Converte a saída do container em Resources (ResourceList ou stream)."""
        try:
            documents = parse_documents(text)
        except MalformedDocumentError as e:
            raise FilterExecutionError(
                message=f"function {self.image} produced invalid output: {e}",
                details={"image": self.image},
            ) from e

        if len(documents) == 1 and documents[0].get("kind") == RESOURCE_LIST_KIND:
            items = documents[0].get("items") or []
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise FilterExecutionError(
                    message=f"function {self.image} returned a ResourceList with invalid items",
                    details={"image": self.image},
                )
            documents = items

        return [_restore_origin(doc) for doc in documents]

    def apply(self, resources: List[Resource]) -> List[Resource]:
        command = self.build_command()
        try:
            completed = subprocess.run(
                command,
                input=self.encode_input(resources),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise FilterExecutionError(
                message=f"function {self.image} timed out after {self.timeout}s",
                details={"image": self.image, "timeout": self.timeout},
            ) from e
        except OSError as e:
            raise FilterExecutionError(
                message=f"cannot start container engine {self.engine!r}: {e}",
                details={"image": self.image, "engine": self.engine},
                hint="Verifique se o container engine está instalado e no PATH",
            ) from e

        if completed.returncode != 0:
            raise FilterExecutionError(
                message=f"function {self.image} exited with status {completed.returncode}",
                details={
                    "image": self.image,
                    "returncode": completed.returncode,
                    "stderr": (completed.stderr or "").strip(),
                },
            )

        return self.decode_output(completed.stdout or "")


def make_container_filter_factory(
    *,
    engine: str = DEFAULT_ENGINE,
    timeout: Optional[float] = None,
) -> FilterFactory:
    """Factory de ContainerFilter com engine e timeout fixos."""

    def factory(image: str, home: str, config: Dict[str, Any]) -> ContainerFilter:
        return ContainerFilter(image, config, home, engine=engine, timeout=timeout)

    return factory


def container_filter_factory(image: str, home: str, config: Dict[str, Any]) -> ContainerFilter:
    """Factory padrão do FunctionRunner."""
    return ContainerFilter(image, config, home)
