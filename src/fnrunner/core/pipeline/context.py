"""
Contexto de execução de uma run do fnrunner.

Este módulo define o `RunContext`, a estrutura que acompanha uma única
invocação do orquestrador e concentra o log estruturado de eventos e os
warnings não fatais de cada estágio.

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Estrutura simples e testável

Invariantes:
    - Logs sempre incluem `run_id` e `stage`
    - Warnings são agrupados por `stage`

Limites explícitos:
    - Não executa Filters
    - Não persiste dados automaticamente
    - Não registra eventos no Manifest
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


@dataclass
class RunContext:
    """
    Contexto compartilhado de uma run.

    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação do contexto
    - config: configuração imutável da run (RunConfig)
    - meta: metadados livres (ex.: origem da invocação)
    - events: log estruturado de eventos
    - warnings: warnings por estágio
    """

    run_id: str
    created_at: datetime
    config: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def new(cls, config: Any = None, **meta: Any) -> "RunContext":
        return cls(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=config,
            meta=dict(meta),
        )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, stage: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "stage": stage,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, stage: str, message: str) -> None:
        if stage not in self.warnings:
            self.warnings[stage] = []
        self.warnings[stage].append(message)
        self.log(stage=stage, level="warning", message=message)

    def events_for(self, stage: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("stage") == stage]
