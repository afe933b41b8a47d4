"""Experimental validation -- mark predictions confirmed by mass-spec pulldowns.

A hits file lists, per bait, the UniProt accessions a pulldown recovered:

    {"IFT121": {"uniprot": "Q9P2L0", "unique_uniprots": ["Q13635", ...]}}

Every AF3 interaction of that bait whose prey is among the hits gets the
validation payload stored on ``experimental_validation``. The bait key may
be an accession, a display name or a UniProt alias; ``uniprot`` wins when
given.
"""

from __future__ import annotations

import datetime
import logging
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, aliased

from protoview.db.models.complex import ComplexInteraction
from protoview.db.models.interaction import Interaction
from protoview.db.models.protein import Protein, ProteinAlias
from protoview.exceptions import ParseError
from protoview.models import ToolGeneration
from protoview.services.identifiers import ACCESSION_RE

logger = logging.getLogger(__name__)


class PulldownHits(BaseModel):
    uniprot: str | None = None
    unique_uniprots: list[str] = []


class ExperimentalValidation(BaseModel):
    validated: bool = True
    method: str = "PD_MS"
    source: str
    date: datetime.date = Field(default_factory=datetime.date.today)
    notes: str | None = None
    source_file: str | None = None


_HITS = TypeAdapter(dict[str, PulldownHits])


def load_hits(path: Path | str) -> dict[str, PulldownHits]:
    path = Path(path)
    try:
        return _HITS.validate_json(path.read_bytes())
    except OSError as exc:
        raise ParseError(f"Cannot read {path}: {exc}") from exc
    except ValidationError as exc:
        raise ParseError(f"Invalid hits file {path}: {exc}") from exc


def resolve_bait(db: Session, label: str, accession: str | None = None) -> Protein | None:
    """Protein for a bait key: explicit accession, then accession-like key, then names."""
    candidate = (accession or "").strip().upper()
    if not candidate and ACCESSION_RE.fullmatch(label.strip()):
        candidate = label.strip().upper()
    if candidate:
        return db.execute(
            select(Protein).where(Protein.accession == candidate)
        ).scalar_one_or_none()

    stmt = (
        select(Protein)
        .outerjoin(ProteinAlias, ProteinAlias.protein_id == Protein.protein_id)
        .where(or_(Protein.display_name == label, ProteinAlias.alias_name == label))
        .where(Protein.is_synthetic.is_(False))
        .order_by(Protein.protein_id)
    )
    return db.execute(stmt).scalars().first()


def attach_validation(
    db: Session,
    hits: dict[str, PulldownHits],
    validation: ExperimentalValidation,
    dry_run: bool = False,
) -> dict:
    """Store *validation* on AF3 interactions whose prey a pulldown recovered."""
    payload = validation.model_dump(mode="json")
    summary = {"baits": 0, "unresolved_baits": [], "validated": 0, "dry_run": dry_run}
    prey = aliased(Protein)

    for label, entry in hits.items():
        bait = resolve_bait(db, label, entry.uniprot)
        if bait is None:
            logger.warning("No stored protein for bait %s; skipped", label)
            summary["unresolved_baits"].append(label)
            continue
        summary["baits"] += 1

        wanted = {acc.strip().upper() for acc in entry.unique_uniprots if acc.strip()}
        if not wanted:
            continue
        rows = db.execute(
            select(Interaction)
            .join(prey, Interaction.prey_protein_id == prey.protein_id)
            .where(
                Interaction.bait_protein_id == bait.protein_id,
                Interaction.alphafold_version == ToolGeneration.CURRENT,
                prey.accession.in_(sorted(wanted)),
            )
        ).scalars().all()
        for row in rows:
            row.experimental_validation = dict(payload)
        summary["validated"] += len(rows)
        logger.info(
            "%s (%s): %d pulldown hits, %d predictions validated",
            label, bait.accession, len(wanted), len(rows),
        )

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return summary


def restamp_validation(db: Session, validation: ExperimentalValidation, dry_run: bool = False) -> dict:
    """Rewrite the payload on every record already validated by the same method."""
    payload = validation.model_dump(mode="json")
    counts = {}
    for model in (Interaction, ComplexInteraction):
        rows = db.execute(
            select(model).where(model.experimental_validation.is_not(None))
        ).scalars().all()
        matched = [
            row for row in rows
            if (row.experimental_validation or {}).get("method") == validation.method
        ]
        for row in matched:
            row.experimental_validation = dict(payload)
        counts[model.__tablename__] = len(matched)

    if dry_run:
        db.rollback()
    else:
        db.commit()
    return counts
