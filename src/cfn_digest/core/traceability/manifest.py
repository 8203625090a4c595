# src/cfn_digest/core/traceability/manifest.py
"""
Manifest v1 — registro rastreável de um cálculo de digests.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run_id, started_at, versão)
    - hashes das entradas (configuração efetiva e template)
    - digests produzidos por recurso
    - Event Log ordenado e erros canônicos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (`sort_keys`)

Limites explícitos:
    - Não calcula digests
    - Não valida semântica dos eventos
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class DigestManifest:
    """
    Manifest v1 de um cálculo de digests.

    Campos principais:
        - run: metadados da execução (run_id, started_at, cfn_digest_version)
        - inputs: hashes da configuração e do template
        - digests: logical id → digest (vazio até `record_digests`)
        - events: Event Log ordenado
        - errors: payloads canônicos de erro (`DigestErrorPayload.to_dict()`)
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    digests: Dict[str, str] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "digests": dict(self.digests),
            "events": [dict(e) for e in self.events],
            "errors": [dict(e) for e in self.errors],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DigestManifest":
        """Reconstrução permissiva: campos ausentes iniciam vazios."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            digests=dict(data.get("digests", {}) or {}),
            events=[dict(e) for e in (data.get("events", []) or [])],
            errors=[dict(e) for e in (data.get("errors", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
    template_hash: str,
) -> DigestManifest:
    """
    Cria o Manifest inicial de um cálculo (Manifest v1).

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio.

    Args:
        run_id (str): Identificador da execução.
        started_at (datetime): Timestamp de início.
        version (str): Versão do cfn-digest utilizada.
        config_hash (str): Hash da configuração efetiva.
        template_hash (str): Hash canônico do template de entrada.

    Returns:
        DigestManifest: Manifest inicial, sem digests nem eventos.
    """
    return DigestManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "cfn_digest_version": version,
        },
        inputs={
            "config_hash": config_hash,
            "template_hash": template_hash,
        },
    )


def add_event(
    manifest: DigestManifest,
    *,
    event_type: str,
    ts: datetime,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona um evento explícito ao Event Log, preservando a ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def record_digests(manifest: DigestManifest, *, digests: Dict[str, str], ts: datetime) -> None:
    """Registra os digests produzidos e o evento `digests_recorded`."""
    manifest.digests = dict(digests)
    manifest.run["finished_at"] = _iso(ts)
    manifest.run["status"] = "success"
    add_event(manifest, event_type="digests_recorded", ts=ts, payload={"count": len(digests)})


def record_failure(manifest: DigestManifest, *, error: Dict[str, Any], ts: datetime) -> None:
    """Registra um erro canônico e marca a execução como `failed`."""
    manifest.errors.append(dict(error))
    manifest.run["finished_at"] = _iso(ts)
    manifest.run["status"] = "failed"
    add_event(manifest, event_type="digest_failed", ts=ts, payload={"type": error.get("type")})


def attach_context_events(manifest: DigestManifest, events: List[Dict[str, Any]]) -> None:
    """Copia para o Event Log os eventos estruturados de um `DigestContext`."""
    for e in events:
        ev = {"event_type": "context_log", "timestamp": e.get("timestamp")}
        ev["payload"] = {k: v for k, v in e.items() if k != "timestamp"}
        manifest.events.append(ev)


def save_manifest(manifest: Union[DigestManifest, Dict[str, Any]], path: Path) -> None:
    """Persiste o Manifest em JSON determinístico, criando diretórios se necessário."""
    data = manifest.to_dict() if isinstance(manifest, DigestManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> DigestManifest:
    """
    Carrega um Manifest persistido.

    Raises:
        json.JSONDecodeError: Em caso de JSON inválido.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    return DigestManifest.from_dict(data)
