"""Deduplicator / precedence resolver.

The same interaction is often loaded more than once: a v3 analysis, its v4
re-analysis and the annotated text report can all describe one model. Such
rows share a duplicate-equivalence key (bait, prey, iptm, strict contacts
with null as 0) while differing in source path, so the store's uniqueness
constraint lets them coexist. Grouping is done over the whole corpus; within
each group exactly one row survives:

    v4 origin > v3 origin > anything else, then highest id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from protoview.db.models.complex import ComplexInteraction
from protoview.db.models.interaction import Interaction
from protoview.db.models.protein import Protein
from protoview.models import SchemaVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    record_id: int
    key: tuple
    schema_version: str | None = None
    source_origin: str = ""


@dataclass
class DedupPlan:
    groups: list[list[Candidate]] = field(default_factory=list)
    keep: list[int] = field(default_factory=list)
    delete: list[int] = field(default_factory=list)

    @property
    def duplicate_groups(self) -> int:
        return len(self.groups)


def rank_origin(schema_version, source_origin: str | None) -> int:
    """2 for v4 origin, 1 for v3, 0 otherwise.

    The schema token decides; rows written before it was recorded fall back
    on the source path suffix.
    """
    version = _schema_value(schema_version)
    if version == SchemaVersion.V4.value:
        return 2
    if version == SchemaVersion.V3.value:
        return 1
    origin = source_origin or ""
    if origin.endswith("v4.json"):
        return 2
    if origin.endswith("v3.json"):
        return 1
    return 0


def origin_rank(candidate: Candidate) -> int:
    return rank_origin(candidate.schema_version, candidate.source_origin)


def plan_deduplication(candidates: Iterable[Candidate]) -> DedupPlan:
    """Pick one survivor per duplicate group; everything else is deleted."""
    by_key: dict[tuple, list[Candidate]] = {}
    for candidate in candidates:
        by_key.setdefault(candidate.key, []).append(candidate)

    plan = DedupPlan()
    for key in sorted(by_key, key=repr):
        group = by_key[key]
        if len(group) < 2:
            continue
        ordered = sorted(group, key=lambda c: (origin_rank(c), c.record_id), reverse=True)
        plan.groups.append(ordered)
        plan.keep.append(ordered[0].record_id)
        plan.delete.extend(c.record_id for c in ordered[1:])
    return plan


def _schema_value(value) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", value)


def interaction_candidates(db: Session, accession: str | None = None) -> list[Candidate]:
    """Candidates for pairwise rows, optionally only those touching *accession*."""
    stmt = select(
        Interaction.interaction_id,
        Interaction.bait_protein_id,
        Interaction.prey_protein_id,
        Interaction.iptm,
        Interaction.contacts_pae_lt_3,
        Interaction.analysis_version,
        Interaction.source_path,
    )
    if accession:
        protein_id = db.execute(
            select(Protein.protein_id).where(Protein.accession == accession.upper())
        ).scalar_one_or_none()
        if protein_id is None:
            return []
        stmt = stmt.where(
            or_(
                Interaction.bait_protein_id == protein_id,
                Interaction.prey_protein_id == protein_id,
            )
        )
    return [
        Candidate(
            record_id=row.interaction_id,
            key=(row.bait_protein_id, row.prey_protein_id, row.iptm, row.contacts_pae_lt_3 or 0),
            schema_version=_schema_value(row.analysis_version),
            source_origin=row.source_path,
        )
        for row in db.execute(stmt)
    ]


def complex_interaction_candidates(db: Session) -> list[Candidate]:
    """Candidates for complex rows; the complex stands in for the bait."""
    stmt = select(
        ComplexInteraction.complex_interaction_id,
        ComplexInteraction.bait_complex_id,
        ComplexInteraction.prey_protein_id,
        ComplexInteraction.iptm,
        ComplexInteraction.contacts_pae_lt_3,
        ComplexInteraction.analysis_version,
        ComplexInteraction.source_path,
    )
    return [
        Candidate(
            record_id=row.complex_interaction_id,
            key=(row.bait_complex_id, row.prey_protein_id, row.iptm, row.contacts_pae_lt_3 or 0),
            schema_version=_schema_value(row.analysis_version),
            source_origin=row.source_path,
        )
        for row in db.execute(stmt)
    ]


def deduplicate(db: Session, writer, accession: str | None = None) -> dict:
    """Plan and apply deduplication for pairwise and complex rows.

    *writer* is a :class:`~protoview.services.reconciliation.ReconciliationWriter`;
    in dry-run mode it only counts what it would delete.
    """
    pairwise = plan_deduplication(interaction_candidates(db, accession))
    complexes = plan_deduplication([] if accession else complex_interaction_candidates(db))

    deleted = writer.delete_ids(Interaction, pairwise.delete)
    deleted += writer.delete_ids(ComplexInteraction, complexes.delete)

    summary = {
        "duplicate_groups": pairwise.duplicate_groups + complexes.duplicate_groups,
        "deleted": deleted,
    }
    logger.info(
        "Deduplication: %d groups, %d rows %s",
        summary["duplicate_groups"],
        deleted,
        "would be deleted" if writer.dry_run else "deleted",
    )
    return summary
