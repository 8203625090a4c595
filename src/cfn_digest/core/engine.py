# src/cfn_digest/core/engine.py
"""
Engine de execução rastreável do cfn-digest.

O `DigestEngine` envolve `compute_resource_digests` com as camadas
ambientes do projeto:
    - resolve a configuração efetiva
    - cria um `DigestContext` para eventos estruturados
    - cria e preenche o Manifest (hashes de entrada, digests, eventos)
    - converte falhas em `DigestErrorPayload`, sem propagar exceções

Use `compute_resource_digests` diretamente quando exceções forem
preferíveis a um resultado com `status="failed"`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .._version import __version__
from .config import ConfigError, compute_config_hash, resolve_config
from .context import DigestContext, new_context
from .digest import compute_resource_digests
from .errors import exception_to_payload
from .hashing import hash_object
from .traceability.manifest import (
    DigestManifest,
    attach_context_events,
    create_manifest,
    record_digests,
    record_failure,
)


@dataclass(frozen=True)
class DigestRunResult:
    status: str
    digests: Dict[str, str]
    manifest: DigestManifest
    context: DigestContext
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class DigestEngine:
    def __init__(self, *, config: Optional[Dict[str, Any]] = None, run_id: Optional[str] = None):
        self.overrides: Dict[str, Any] = dict(config or {})
        self.run_id = run_id

    def _config_hash(self) -> str:
        # Com config inválida, o hash identifica os overrides recebidos.
        try:
            config = resolve_config(self.overrides)
        except ConfigError:
            config = self.overrides
        try:
            return compute_config_hash(config)
        except TypeError:
            # valores fora do modelo JSON (ex.: datas do YAML) entram pela forma textual
            return compute_config_hash(json.loads(json.dumps(config, default=str)))

    def run(self, template: Dict[str, Any]) -> DigestRunResult:
        started_at = datetime.now(timezone.utc)
        ctx = new_context(config=self.overrides, run_id=self.run_id)
        manifest = create_manifest(
            run_id=ctx.run_id,
            started_at=started_at,
            version=__version__,
            config_hash=self._config_hash(),
            template_hash=hash_object(template),
        )

        try:
            digests = compute_resource_digests(template, config=self.overrides, ctx=ctx)
        except Exception as e:
            error = exception_to_payload(e).to_dict()
            ctx.log(step_id="engine", level="ERROR", message=error["message"], error_type=error["type"])
            attach_context_events(manifest, ctx.events)
            record_failure(manifest, error=error, ts=datetime.now(timezone.utc))
            return DigestRunResult(status="failed", digests={}, manifest=manifest, context=ctx, error=error)

        attach_context_events(manifest, ctx.events)
        record_digests(manifest, digests=digests, ts=datetime.now(timezone.utc))
        return DigestRunResult(status="success", digests=digests, manifest=manifest, context=ctx)
