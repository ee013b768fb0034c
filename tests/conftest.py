# tests/conftest.py
"""
Fixtures compartilhados para testes do fnrunner.

Este módulo define fixtures reutilizáveis que fornecem:
- pacotes de configuração materializados em `tmp_path`
- builders de documentos de função e de Resources ordinários
- um RunContext determinístico
- uma FilterFactory in-process que reescreve campos dos documentos,
  permitindo runs completas sem container engine

Decisões arquiteturais:
    - Fixtures retornam callables simples quando o teste precisa variar entradas
    - Filters fake usam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa container real
    - Todo I/O acontece sob `tmp_path`
    - Dados retornados são determinísticos e isolados
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest
import yaml


FUNCTION_ANNOTATION = "config.kubernetes.io/function"
LOCAL_CONFIG_ANNOTATION = "config.kubernetes.io/local-config"


def _function_doc(
    image: str,
    *,
    name: str = "fn",
    local_config: bool = True,
    scope: Optional[str] = None,
    kind: str = "ValueReplacer",
    **fields: Any,
) -> Dict[str, Any]:
    payload = f"container:\n  image: {image}\n"
    if scope is not None:
        payload += f"scope: {scope}\n"
    annotations = {FUNCTION_ANNOTATION: payload}
    if local_config:
        annotations[LOCAL_CONFIG_ANNOTATION] = "true"
    doc: Dict[str, Any] = {
        "apiVersion": "example.com/v1alpha1",
        "kind": kind,
        "metadata": {"name": name, "annotations": annotations},
    }
    doc.update(fields)
    return doc


def _resource_doc(kind: str, name: str, namespace: Optional[str] = None, **fields: Any) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    doc: Dict[str, Any] = {"apiVersion": "apps/v1", "kind": kind, "metadata": metadata}
    doc.update(fields)
    return doc


@pytest.fixture
def function_doc():
    """
    Builder de documentos de definição de função.

    Uso:
        function_doc("gcr.io/example.com/image:v1", stringMatch="Deployment", replace="StatefulSet")
    """
    return _function_doc


@pytest.fixture
def resource_doc():
    """Builder de Resources ordinários (`kind`, `metadata.name`, namespace opcional)."""
    return _resource_doc


@pytest.fixture
def write_package(tmp_path):
    """
    Materializa um pacote em disco.

    Recebe `{path_relativo: conteúdo}`, onde o conteúdo é texto YAML ou
    uma lista de documentos (serializados como stream multi-documento).
    Retorna a raiz do pacote.
    """

    def _write(files: Dict[str, Union[str, List[Dict[str, Any]]]], root: str = "pkg") -> Path:
        base = tmp_path / root
        base.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            target = base / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if not isinstance(content, str):
                content = yaml.safe_dump_all(content, sort_keys=False)
            target.write_text(content, encoding="utf-8")
        return base

    return _write


@pytest.fixture
def read_documents():
    """Lê um arquivo YAML multi-documento e devolve a lista de documentos."""

    def _read(path: Path) -> List[Dict[str, Any]]:
        return [d for d in yaml.safe_load_all(Path(path).read_text(encoding="utf-8")) if d is not None]

    return _read


@pytest.fixture
def fixed_ctx():
    """RunContext com `run_id` e `created_at` fixos."""
    from fnrunner.core.pipeline.context import RunContext

    return RunContext(
        run_id="test-run",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class ReplaceKindFilter:
    """
    Filter in-process: troca `kind == stringMatch` por `replace`.

    Registra cada chamada em `calls` como (imagem, paths recebidos).
    """

    def __init__(self, image: str, home: str, config: Dict[str, Any], calls: list):
        self.image = image
        self.home = home
        self.match = config.get("stringMatch")
        self.replace = config.get("replace")
        self.calls = calls

    def apply(self, resources):
        self.calls.append((self.image, [r.path for r in resources]))
        for resource in resources:
            if self.match is not None and resource.content.get("kind") == self.match:
                resource.content["kind"] = self.replace
        return resources

    def __str__(self) -> str:
        return self.image


class RecordingFactory:
    """
    FilterFactory fake que registra as construções e as execuções.

    - `built`: lista de (imagem, home, config) na ordem de construção
    - `calls`: lista de (imagem, paths) na ordem de execução
    """

    def __init__(self):
        self.built: List[tuple] = []
        self.calls: List[tuple] = []

    def __call__(self, image: str, home: str, config: Dict[str, Any]) -> ReplaceKindFilter:
        self.built.append((image, home, config))
        return ReplaceKindFilter(image, home, config, self.calls)

    @property
    def executed(self) -> List[str]:
        return [image for image, _ in self.calls]


@pytest.fixture
def recording_factory():
    """FilterFactory in-process com troca de `kind` e registro de chamadas."""
    return RecordingFactory()
