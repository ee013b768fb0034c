# tests/core/pipeline/test_resource_paths.py
"""
Testes da normalização de paths de origem dos Resources.

A normalização pertence aos tipos canônicos do pipeline e é
compartilhada pelo ScopeGuard e pelo Writer.
"""

import pytest

try:
    from fnrunner.core.pipeline.types import normalize_path
    from fnrunner.core.engine import scope as scope_module
    from fnrunner.core.io import writer as writer_module
except Exception as e:  # noqa: BLE001
    normalize_path = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if normalize_path is None:
        pytest.fail(f"Missing normalize_path. Import error: {_IMPORT_ERR}")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", ""),
        (".", ""),
        ("./a/../b/c.yaml", "b/c.yaml"),
        ("a\\b.yaml", "a/b.yaml"),
        ("a//b/", "a/b"),
    ],
)
def test_normalize_path(raw, expected):
    _require_imports()
    assert normalize_path(raw) == expected


def test_scope_guard_and_writer_share_the_same_helper():
    _require_imports()
    assert scope_module.normalize_path is normalize_path
    assert writer_module.normalize_path is normalize_path
    assert not hasattr(scope_module, "write_in_place")
