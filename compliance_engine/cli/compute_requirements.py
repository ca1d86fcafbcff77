"""
CLI para recalcular requisitos desde un snapshot JSON.

Uso:
    python -m compliance_engine.cli.compute_requirements snapshot.json
    python -m compliance_engine.cli.compute_requirements snapshot.json --now 2025-06-01T08:00:00 --output result.json

El snapshot contiene:
    {"contractor": {...}, "flags": {...}, "documents": [...]}
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from compliance_engine.config import get_log_level, load_aggregation_settings
from compliance_engine.requirements.compliance_aggregator_v1 import compute_requirements
from compliance_engine.shared.compliance_models_v1 import (
    ContractorDocumentV1,
    ContractorV1,
    SubcontractorFlagsV1,
)
from compliance_engine.shared.time_utils import to_datetime

logger = logging.getLogger(__name__)


class ComplianceSnapshotV1(BaseModel):
    """Entrada del CLI: datos ya resueltos por el sistema externo."""
    contractor: ContractorV1
    flags: SubcontractorFlagsV1 = Field(default_factory=SubcontractorFlagsV1)
    documents: List[ContractorDocumentV1] = Field(default_factory=list)


def load_snapshot(file_path: str) -> ComplianceSnapshotV1:
    raw = json.loads(Path(file_path).read_text(encoding="utf-8"))
    return ComplianceSnapshotV1.model_validate(raw)


def _parse_now(value: str) -> datetime:
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return to_datetime(datetime.fromisoformat(raw))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Fecha ISO no válida: {value}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Recalcula requisitos documentales de un subcontratista")
    parser.add_argument("snapshot", help="Ruta al snapshot JSON")
    parser.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="Reloj a usar (ISO 8601, default: ahora)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Fichero donde guardar el resultado completo (JSON)"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=get_log_level())

    try:
        snapshot = load_snapshot(args.snapshot)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"[compute-requirements] Error loading snapshot: {e}", file=sys.stderr)
        return 1

    computation = compute_requirements(
        snapshot.contractor,
        snapshot.flags,
        snapshot.documents,
        settings=load_aggregation_settings(),
        now=args.now,
    )
    response = computation.response

    print(f"[compute-requirements] Contractor: {snapshot.contractor.company_name} ({snapshot.contractor.id})")
    print(f"  Created: {response.created_requirements}")
    print(f"  Updated: {response.updated_requirements}")
    print(f"  Warnings: {response.warning_count}")
    for warning in response.warnings:
        due = f" (bis {warning.due_date.date().isoformat()})" if warning.due_date else ""
        print(f"    - [{warning.status.value}] {warning.document_name}{due}")
    print(f"  Global active: {response.subcontractor_global_active}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(computation.model_dump_json(indent=2), encoding="utf-8")
        print(f"  Result saved to: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
