# tests/core/pipeline/test_run_context_logging.py
"""
Testes de logging estruturado e warnings do RunContext.

Invariantes:
    - Cada chamada a `log` adiciona um evento com run_id, stage, level e message
    - Metadados adicionais são mantidos no evento
    - Warnings são agrupados por stage e também viram eventos de nível warning
"""

import pytest

try:
    from fnrunner.core.pipeline.context import RunContext
except Exception as e:  # noqa: BLE001
    RunContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if RunContext is None:
        pytest.fail(f"Missing RunContext. Import error: {_IMPORT_ERR}")


def test_log_event_structure(fixed_ctx):
    _require_imports()
    fixed_ctx.log(stage="load", level="info", message="documents collected", package_documents=3)

    ev = fixed_ctx.events[-1]
    assert ev["run_id"] == "test-run"
    assert ev["stage"] == "load"
    assert ev["level"] == "info"
    assert ev["message"] == "documents collected"
    assert ev["package_documents"] == 3
    assert "timestamp" in ev


def test_warning_collection(fixed_ctx):
    _require_imports()
    fixed_ctx.add_warning(stage="discovery", message="stray document")
    fixed_ctx.add_warning(stage="discovery", message="another")

    assert fixed_ctx.warnings == {"discovery": ["stray document", "another"]}
    assert [e["level"] for e in fixed_ctx.events_for("discovery")] == ["warning", "warning"]


def test_new_contexts_are_isolated():
    _require_imports()
    a = RunContext.new(origin="test")
    b = RunContext.new()
    a.log(stage="load", level="info", message="x")

    assert a.run_id != b.run_id
    assert b.events == []
    assert a.meta == {"origin": "test"}
