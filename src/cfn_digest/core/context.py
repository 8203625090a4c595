# src/cfn_digest/core/context.py
"""
Contexto de execução do cálculo de digests.

Este módulo define o `DigestContext`, a estrutura opcional passada às
operações do engine para registrar, de forma estruturada, o que aconteceu
durante um cálculo (início, recursos processados, ciclos, término).

O cfn-digest não emite logs por efeito colateral: todo evento é
acumulado explicitamente no contexto e pode ser inspecionado pelo
chamador ou incorporado ao Manifest.

Invariantes:
    - Eventos sempre incluem `run_id`, `step_id`, `level`, `message` e `timestamp`
    - Warnings são agrupados por `step_id`
    - Cada chamada do engine recebe (no máximo) um contexto próprio

Limites explícitos:
    - Não calcula digests
    - Não persiste eventos automaticamente
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class DigestContext:
    """
    Contexto de uma execução do engine de digests.

    Campos:
        - run_id: identificador da execução
        - created_at: timestamp UTC de criação
        - config: configuração efetiva utilizada
        - meta: metadados livres do chamador (ex.: nome da stack)
        - events: log estruturado, na ordem de emissão
        - warnings: mensagens não fatais por `step_id`
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        if level not in LEVELS:
            raise ValueError(f"Nível de log inválido: {level}")
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
        self.log(step_id=step_id, level="WARNING", message=message)

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["step_id"] == step_id]


def new_context(
    *,
    config: Optional[Dict[str, Any]] = None,
    run_id: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> DigestContext:
    """Cria um `DigestContext` com `run_id` aleatório quando não informado."""
    return DigestContext(
        run_id=run_id or f"digest-{uuid.uuid4().hex[:12]}",
        created_at=datetime.now(timezone.utc),
        config=dict(config or {}),
        meta=dict(meta or {}),
    )
