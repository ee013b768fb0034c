# tests/core/engine/test_planner_order.py
"""
Testes da ordenação de funções (plan_functions).

Regras validadas:
- implícitas em profundidade decrescente do diretório home
- empates resolvidos pelo índice de descoberta
- explícitas sempre por último, na ordem das fontes
- InclusionPolicy decide se as implícitas participam
- a mesma entrada sempre produz a mesma ordem
"""

import pytest

try:
    from fnrunner.core.engine.planner import MisplacedFunctionError, plan_functions
    from fnrunner.core.pipeline.types import FunctionOrigin, FunctionSpec, InclusionPolicy
except Exception as e:  # noqa: BLE001
    plan_functions = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if plan_functions is None:
        pytest.fail(f"Missing planner. Import error: {_IMPORT_ERR}")


def _implicit(image, home, index):
    return FunctionSpec(image=image, home=home, index=index, origin=FunctionOrigin.IMPLICIT)


def _explicit(image, source_index, index, home=""):
    return FunctionSpec(
        image=image,
        home=home,
        index=index,
        origin=FunctionOrigin.EXPLICIT,
        source_index=source_index,
    )


@pytest.mark.parametrize(
    "implicit, explicit, policy, expected",
    [
        # função implícita única
        ([("img:v1", "foo", 0)], [], "default", ["img:v1"]),
        # mais profunda primeiro
        ([("a", "", 0), ("b", "foo", 1)], [], "default", ["b", "a"]),
        # fonte explícita desliga as implícitas por padrão
        ([("b", "", 0)], [("a", 0, 1)], "default", ["a"]),
        # skip forçado
        ([("a", "foo", 0), ("b", "", 1)], [], "force_skip", []),
        # inclusão forçada sem fontes explícitas
        ([("a", "foo", 0), ("b", "", 1)], [], "force_include", ["a", "b"]),
        # implícitas antes das explícitas
        ([("b", "", 0)], [("a", 0, 1)], "force_include", ["b", "a"]),
    ],
)
def test_ordering_table(implicit, explicit, policy, expected):
    _require_imports()
    specs = plan_functions(
        [_implicit(*i) for i in implicit],
        [_explicit(*e) for e in explicit],
        policy=InclusionPolicy(policy),
        has_explicit_sources=bool(explicit),
    )
    assert [s.image for s in specs] == expected


def test_force_skip_keeps_explicit_functions():
    """FORCE_SKIP remove apenas as implícitas; explícitas continuam rodando."""
    _require_imports()
    specs = plan_functions(
        [_implicit("b", "", 0)],
        [_explicit("a", 0, 1)],
        policy=InclusionPolicy.FORCE_SKIP,
        has_explicit_sources=True,
    )
    assert [s.image for s in specs] == ["a"]


def test_ties_resolved_by_discovery_index():
    _require_imports()
    specs = plan_functions(
        [_implicit("z", "x/y", 3), _implicit("m", "a/b", 1), _implicit("root", "", 0), _implicit("k", "c", 2)],
        [],
    )
    assert [s.image for s in specs] == ["m", "z", "k", "root"]


def test_explicit_order_follows_sources_then_index():
    _require_imports()
    specs = plan_functions(
        [],
        [_explicit("s1-b", 1, 9), _explicit("s0", 0, 7), _explicit("s1-a", 1, 8)],
        has_explicit_sources=True,
    )
    assert [s.image for s in specs] == ["s0", "s1-a", "s1-b"]


def test_ordering_is_deterministic():
    _require_imports()
    implicit = [_implicit("a", "x", 0), _implicit("b", "y", 1), _implicit("c", "x/z", 2)]
    first = plan_functions(implicit, [])
    second = plan_functions(list(reversed(implicit)), [])
    assert [s.image for s in first] == [s.image for s in second] == ["c", "a", "b"]


def test_misplaced_functions_are_rejected():
    _require_imports()
    with pytest.raises(MisplacedFunctionError):
        plan_functions([_explicit("a", 0, 0)], [])
    with pytest.raises(MisplacedFunctionError):
        plan_functions([], [_implicit("a", "", 0)])
