# tests/core/engine/test_inclusion_policy.py
"""
Testes da InclusionPolicy tri-state.

Tabela validada (inclui funções implícitas?):

    política        | sem fontes explícitas | com fontes explícitas
    DEFAULT         | sim                   | não
    FORCE_SKIP      | não                   | não
    FORCE_INCLUDE   | sim                   | sim
"""

import pytest

try:
    from fnrunner.core.pipeline.types import InclusionPolicy
except Exception as e:  # noqa: BLE001
    InclusionPolicy = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if InclusionPolicy is None:
        pytest.fail(f"Missing InclusionPolicy. Import error: {_IMPORT_ERR}")


@pytest.mark.parametrize(
    "policy, has_explicit, expected",
    [
        ("default", False, True),
        ("default", True, False),
        ("force_skip", False, False),
        ("force_skip", True, False),
        ("force_include", False, True),
        ("force_include", True, True),
    ],
)
def test_includes_implicit_table(policy, has_explicit, expected):
    _require_imports()
    assert InclusionPolicy(policy).includes_implicit(has_explicit) is expected


def test_from_flag():
    _require_imports()
    assert InclusionPolicy.from_flag(None) is InclusionPolicy.DEFAULT
    assert InclusionPolicy.from_flag(True) is InclusionPolicy.FORCE_SKIP
    assert InclusionPolicy.from_flag(False) is InclusionPolicy.FORCE_INCLUDE
