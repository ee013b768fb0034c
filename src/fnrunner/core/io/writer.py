"""
Writer/Sink: materialização do resultado final do pipeline.

Dois modos mutuamente exclusivos:

- in-place (`write_in_place`):
    - agrupa os Resources pelo path de origem (ordem de primeira aparição)
    - (re)escreve cada arquivo como stream YAML multi-documento
    - remove arquivos que existiam antes da run e ficaram sem Resources
    - atribui path determinístico a Resources sem origem:
      `<namespace>/<kind>_<name>.yaml` em minúsculas
    - preserva as definições de função do pacote: quando um arquivo que
      as contém é reescrito, elas são gravadas primeiro; arquivos que só
      contêm funções nunca são tocados;
      um arquivo que perdeu todos os Resources ordinários mas guarda
      funções é reescrito só com as funções

- stream combinado (`write_stream`):
    - serializa toda a lista, na ordem do pipeline, no destino configurado
    - nenhum arquivo de origem é alterado

Invariantes:
    - Todos os destinos são validados e todo conteúdo é serializado
      antes da primeira escrita
    - A escrita é interrompida na primeira falha (sem best-effort)
    - Paths absolutos ou que escapam da raiz (`..`) são rejeitados
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List, Sequence, TextIO, Union

import yaml  # PyYAML

from fnrunner.core.exceptions import ResourceWriteError
from fnrunner.core.pipeline.types import Resource, normalize_path

from .documents import dump_documents

_UNSAFE_CHARS = re.compile(r"[^a-z0-9._-]+")


@dataclass(frozen=True)
class WriteSummary:
    """Arquivos efetivamente escritos e removidos (paths relativos à raiz)."""

    written: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


def _slug(value: str) -> str:
    return _UNSAFE_CHARS.sub("_", value.lower()).strip("_")


def default_path_for(resource: Resource, position: int) -> str:
    """
    Path determinístico para um Resource sintetizado (sem origem).

    `position` é a posição do Resource entre os sintetizados da run e
    substitui o nome quando `metadata.name` está ausente.
    """
    kind = _slug(resource.kind) or "resource"
    name = _slug(resource.name) or str(position)
    filename = f"{kind}_{name}.yaml"
    namespace = _slug(resource.namespace)
    return f"{namespace}/{filename}" if namespace else filename


def _target(root: Path, relative: str) -> Path:
    pure = PurePosixPath(relative)
    if pure.is_absolute() or ".." in pure.parts:
        raise ResourceWriteError(
            message=f"resource path escapes package root: {relative}",
            details={"path": relative},
        )
    return root.joinpath(*pure.parts)


def _serialize(path: str, documents: Iterable[Dict[str, Any]]) -> str:
    try:
        return dump_documents(documents)
    except yaml.YAMLError as e:
        raise ResourceWriteError(
            message=f"cannot serialize resources for {path}: {e}",
            details={"path": path},
        ) from e


def group_by_path(resources: Iterable[Resource]) -> Dict[str, List[Resource]]:
    """Agrupa Resources por path de destino, preservando a ordem de aparição."""
    groups: Dict[str, List[Resource]] = {}
    synthesized = 0
    for resource in resources:
        path = normalize_path(resource.path)
        if not path:
            path = default_path_for(resource, synthesized)
            synthesized += 1
        groups.setdefault(path, []).append(resource)
    return groups


def write_in_place(
    root: Union[str, Path],
    resources: Sequence[Resource],
    *,
    original_paths: Iterable[str] = (),
    retained: Sequence[Resource] = (),
) -> WriteSummary:
    """
    Escreve o resultado de volta nos arquivos do pacote.

    Args:
        root: raiz do pacote.
        resources: lista final do pipeline.
        original_paths: paths dos Resources ordinários coletados antes da run.
        retained: documentos de função do pacote (nunca passam pelo pipeline).

    Raises:
        ResourceWriteError: path inválido ou falha de I/O.
    """
    root_path = Path(root)
    groups = group_by_path(resources)

    retained_by_path: Dict[str, List[Dict[str, Any]]] = {}
    for doc in retained:
        retained_by_path.setdefault(normalize_path(doc.path), []).append(doc.content)

    targets = {path: _target(root_path, path) for path in groups}

    stale: List[str] = []
    emptied: List[str] = []
    for path in dict.fromkeys(normalize_path(p) for p in original_paths):
        if not path or path in groups:
            continue
        (emptied if path in retained_by_path else stale).append(path)
    for path in emptied:
        groups[path] = []
        targets[path] = _target(root_path, path)
    stale_targets = {path: _target(root_path, path) for path in stale}

    texts = {
        path: _serialize(path, retained_by_path.get(path, []) + [r.content for r in group])
        for path, group in groups.items()
    }

    summary = WriteSummary()
    for path, text in texts.items():
        target = targets[path]
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise ResourceWriteError(
                message=f"cannot write {target}: {e}",
                details={"path": path},
            ) from e
        summary.written.append(path)

    for path, target in stale_targets.items():
        try:
            if target.exists():
                target.unlink()
        except OSError as e:
            raise ResourceWriteError(
                message=f"cannot delete {target}: {e}",
                details={"path": path},
            ) from e
        summary.deleted.append(path)

    return summary


def write_stream(output: Union[str, Path, TextIO], resources: Sequence[Resource]) -> None:
    """
    Serializa a lista final, na ordem do pipeline, em um único stream.

    `output` pode ser um stream de texto ou um path de arquivo.

    Raises:
        ResourceWriteError: falha ao escrever no destino.
    """
    if isinstance(output, (str, Path)):
        target = Path(output)
        text = _serialize(str(target), (r.content for r in resources))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise ResourceWriteError(
                message=f"cannot write {target}: {e}",
                details={"path": str(target)},
            ) from e
        return

    text = _serialize(getattr(output, "name", "<stream>"), (r.content for r in resources))
    try:
        output.write(text)
    except (OSError, ValueError) as e:
        raise ResourceWriteError(
            message=f"cannot write to output stream: {e}",
            details={"path": getattr(output, "name", "<stream>")},
        ) from e
