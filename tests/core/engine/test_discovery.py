# tests/core/engine/test_discovery.py
"""
Testes do FunctionDiscoverer.

Os testes asseguram que:
- documentos com anotação de função e marcador local-config viram FunctionSpec
- documentos de função nunca permanecem no stream de Resources
- função sem marcador local-config é erro fatal com o path ofensor
- o diretório home é o diretório do path de origem
- escopo declarado e override global são respeitados
- documentos ordinários em fontes explícitas são ignorados
"""

import pytest

try:
    from fnrunner.core.engine.discovery import discover, function_spec_from_resource, is_local_config
    from fnrunner.core.exceptions import FunctionDiscoveryError
    from fnrunner.core.pipeline.types import FunctionOrigin, FunctionScope, Resource
except Exception as e:  # noqa: BLE001
    discover = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if discover is None:
        pytest.fail(f"Missing discovery. Import error: {_IMPORT_ERR}")


def test_functions_are_split_from_resources(function_doc, resource_doc):
    _require_imports()
    package = [
        Resource(content=resource_doc("Deployment", "app"), path="app.yaml", index=0),
        Resource(content=function_doc("img:a", stringMatch="Deployment"), path="a/fn.yaml", index=1),
        Resource(content=resource_doc("Service", "svc"), path="a/svc.yaml", index=2),
    ]

    found = discover(package)

    assert [r.name for r in found.resources] == ["app", "svc"]
    assert len(found.implicit) == 1
    spec = found.implicit[0]
    assert spec.image == "img:a"
    assert spec.home == "a"
    assert spec.depth == 1
    assert spec.origin is FunctionOrigin.IMPLICIT
    assert spec.source_index is None
    assert spec.config["stringMatch"] == "Deployment"
    assert found.function_documents == [package[1]]


def test_function_config_is_a_copy(function_doc):
    _require_imports()
    resource = Resource(content=function_doc("img:a", replace="X"), path="fn.yaml", index=0)

    spec = function_spec_from_resource(resource, origin=FunctionOrigin.IMPLICIT)
    spec.config["replace"] = "Y"

    assert resource.content["replace"] == "X"


def test_missing_local_config_is_fatal(function_doc):
    _require_imports()
    package = [Resource(content=function_doc("img:a", local_config=False), path="x/fn.yaml", index=0)]

    with pytest.raises(FunctionDiscoveryError) as ei:
        discover(package)

    assert ei.value.details["path"] == "x/fn.yaml"
    assert ei.value.stage == "discovery"


@pytest.mark.parametrize("value, expected", [("true", True), (True, True), ("false", False), (None, False)])
def test_local_config_marker_values(value, expected):
    _require_imports()
    annotations = {} if value is None else {"config.kubernetes.io/local-config": value}
    resource = Resource(content={"metadata": {"annotations": annotations}})
    assert is_local_config(resource) is expected


def test_function_without_image_is_fatal():
    _require_imports()
    content = {
        "kind": "Fn",
        "metadata": {
            "annotations": {
                "config.kubernetes.io/function": "container: {}\n",
                "config.kubernetes.io/local-config": "true",
            }
        },
    }
    with pytest.raises(FunctionDiscoveryError):
        discover([Resource(content=content, path="fn.yaml", index=0)])


def test_declared_scope_and_global_override(function_doc):
    _require_imports()
    package = [
        Resource(content=function_doc("img:g", scope="global"), path="a/b/g.yaml", index=0),
        Resource(content=function_doc("img:p"), path="a/p.yaml", index=1),
    ]

    local = discover(package)
    assert [s.scope for s in local.implicit] == [FunctionScope.GLOBAL, FunctionScope.PACKAGE]

    overridden = discover(package, global_scope=True)
    assert all(s.is_global for s in overridden.implicit)


def test_unknown_scope_is_fatal(function_doc):
    _require_imports()
    with pytest.raises(FunctionDiscoveryError):
        discover([Resource(content=function_doc("img:x", scope="cluster"), path="fn.yaml", index=0)])


def test_explicit_sources_keep_source_index(function_doc, resource_doc):
    """
    Verifica descoberta nas fontes explícitas.

    - `source_index` é a posição da fonte informada
    - documentos ordinários da fonte vão para `ignored`
    - nenhuma função explícita entra em `function_documents`
    """
    _require_imports()
    sources = [
        [Resource(content=function_doc("img:e1"), path="e1.yaml", index=5)],
        [
            Resource(content=resource_doc("ConfigMap", "stray"), path="x.yaml", index=6),
            Resource(content=function_doc("img:e2"), path="sub/e2.yaml", index=7),
        ],
    ]

    found = discover([], sources)

    assert [(s.image, s.source_index, s.home) for s in found.explicit] == [
        ("img:e1", 0, ""),
        ("img:e2", 1, "sub"),
    ]
    assert all(s.origin is FunctionOrigin.EXPLICIT for s in found.explicit)
    assert [r.name for r in found.ignored] == ["stray"]
    assert found.resources == []
    assert found.function_documents == []
