"""
Manifest v1: rastreabilidade de uma run do fnrunner.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run_id, started_at, versão)
    - entradas (hash da configuração, raiz do pacote, fontes explícitas)
    - estado incremental de cada função executada
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip JSON)
    - UTC é o timezone canônico de todos os timestamps

Limites explícitos:
    - Não executa Filters
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunManifest:
    """
    Manifest v1: registro forense de uma run.

    Campos principais:
        - run: metadados da execução
        - inputs: hash da configuração e fontes de entrada
        - functions: estado de cada função, indexado por `function_id`
          (`<posição>:<imagem>`)
        - events: Event Log ordenado
        - outcome: resultado final da run (status, arquivos escritos/removidos, erro)
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    functions: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    outcome: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "functions": {k: dict(v) for k, v in self.functions.items()},
            "events": [dict(e) for e in self.events],
            "outcome": dict(self.outcome),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run", {}) or {}),
            inputs=dict(data.get("inputs", {}) or {}),
            functions={k: dict(v) for k, v in (data.get("functions", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
            outcome=dict(data.get("outcome", {}) or {}),
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    fnrunner_version: str,
    config_hash: str,
    package_root: str,
    function_paths: Optional[List[str]] = None,
) -> RunManifest:
    """Cria o Manifest inicial de uma run (funções e eventos vazios)."""
    return RunManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "fnrunner_version": fnrunner_version,
        },
        inputs={
            "config_hash": config_hash,
            "package_root": package_root,
            "function_paths": list(function_paths or []),
        },
    )


def add_event(
    manifest: RunManifest,
    *,
    event_type: str,
    ts: datetime,
    function_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona um evento explícito ao Event Log, na ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if function_id is not None:
        ev["function_id"] = function_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def function_started(
    manifest: RunManifest,
    *,
    function_id: str,
    image: str,
    home: str,
    ts: datetime,
) -> None:
    """Marca o início da execução de uma função (status `running`)."""
    entry = manifest.functions.setdefault(function_id, {})
    entry.update(
        {
            "function_id": function_id,
            "image": image,
            "home": home,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="function_started", ts=ts, function_id=function_id, payload={"image": image})


def _duration_ms(entry: Dict[str, Any], ts: datetime) -> int:
    started_iso = entry.get("started_at")
    if not started_iso:
        return 0
    return _ms_between(datetime.fromisoformat(started_iso), ts)


def function_finished(
    manifest: RunManifest,
    *,
    function_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """Registra a conclusão de uma função com status, resumo e métricas."""
    entry = manifest.functions.setdefault(function_id, {"function_id": function_id})
    status = result.get("status", "success")
    entry.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(entry, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
        }
    )
    add_event(
        manifest,
        event_type="function_finished",
        ts=ts,
        function_id=function_id,
        payload={"status": status, "duration_ms": entry["duration_ms"]},
    )


def function_failed(
    manifest: RunManifest,
    *,
    function_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Marca uma função como `failed` e associa o payload de erro."""
    entry = manifest.functions.setdefault(function_id, {"function_id": function_id})
    entry.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(entry, ts),
            "error": error,
        }
    )
    add_event(manifest, event_type="function_failed", ts=ts, function_id=function_id, payload={"error": error})


def save_manifest(manifest: RunManifest, path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (chaves ordenadas)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> RunManifest:
    """Restaura um Manifest persistido por `save_manifest`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return RunManifest.from_dict(data)
