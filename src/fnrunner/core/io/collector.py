"""
ResourceCollector: carga dos documentos do pacote e das fontes explícitas.

Responsabilidades:
- percorrer a raiz do pacote em profundidade, em ordem lexicográfica
  dentro de cada diretório, carregando todo documento YAML
- percorrer, de forma independente, cada fonte explícita de funções
  (arquivo ou diretório) na ordem em que foram informadas
- atribuir a cada documento seu path de origem e um índice de
  descoberta estável, que semeia o desempate da ordenação

Limites explícitos (v1):
- NÃO interpreta anotações (responsabilidade do discovery)
- NÃO retorna carga parcial: qualquer falha aborta com ResourceLoadError
- Entradas ocultas (nome iniciado por ".") são ignoradas
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Sequence, Union

from fnrunner.core.exceptions import ResourceLoadError
from fnrunner.core.pipeline.types import Resource

from .documents import DOCUMENT_SUFFIXES, MalformedDocumentError, parse_documents

PathLike = Union[str, Path]


def _iter_document_files(directory: Path) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ResourceLoadError(
            message=f"cannot list directory {directory}: {e}",
            details={"path": str(directory)},
        ) from e

    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            yield from _iter_document_files(entry)
        elif entry.is_file() and entry.suffix.lower() in DOCUMENT_SUFFIXES:
            yield entry


def _load_file(path: Path, relative: str, start_index: int) -> List[Resource]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceLoadError(
            message=f"cannot read {path}: {e}",
            details={"path": str(path)},
        ) from e

    try:
        documents = parse_documents(text)
    except MalformedDocumentError as e:
        raise ResourceLoadError(
            message=f"malformed document in {path}: {e}",
            details={"path": str(path)},
        ) from e

    return [
        Resource(content=doc, path=relative, index=start_index + offset)
        for offset, doc in enumerate(documents)
    ]


def _collect_tree(root: Path, start_index: int) -> List[Resource]:
    resources: List[Resource] = []
    for file_path in _iter_document_files(root):
        relative = file_path.relative_to(root).as_posix()
        resources.extend(_load_file(file_path, relative, start_index + len(resources)))
    return resources


def collect_package(root: PathLike, *, start_index: int = 0) -> List[Resource]:
    """
    Carrega todos os documentos sob a raiz do pacote.

    Args:
        root: diretório raiz do pacote.
        start_index: primeiro índice de descoberta a atribuir.

    Returns:
        Resources em ordem de travessia (profundidade, lexicográfica),
        com `path` relativo à raiz em notação POSIX.

    Raises:
        ResourceLoadError: raiz inexistente, arquivo ilegível ou documento malformado.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise ResourceLoadError(
            message=f"package root is not a directory: {root_path}",
            details={"path": str(root_path)},
        )
    return _collect_tree(root_path, start_index)


def collect_sources(
    locations: Sequence[PathLike],
    *,
    start_index: int = 0,
) -> List[List[Resource]]:
    """
    Carrega os documentos de cada fonte explícita, uma lista por fonte.

    Um arquivo produz seus documentos com `path` igual ao nome do arquivo;
    um diretório é percorrido como um pacote, com `path` relativo a ele.
    Os índices de descoberta continuam a partir de `start_index`.

    Raises:
        ResourceLoadError: fonte inexistente, ilegível ou malformada.
    """
    collected: List[List[Resource]] = []
    next_index = start_index
    for location in locations:
        path = Path(location)
        if path.is_dir():
            resources = _collect_tree(path, next_index)
        elif path.is_file():
            resources = _load_file(path, path.name, next_index)
        else:
            raise ResourceLoadError(
                message=f"function source not found: {path}",
                details={"path": str(path)},
            )
        collected.append(resources)
        next_index += len(resources)
    return collected
