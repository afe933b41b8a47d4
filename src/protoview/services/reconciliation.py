"""Reconciliation writer -- idempotent upserts and batched duplicate deletion."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from protoview.config import config
from protoview.db.models.complex import ComplexInteraction
from protoview.db.models.interaction import Interaction
from protoview.ingestion.records import ComplexPredictionRecord, PredictionRecord
from protoview.models import SchemaVersion
from protoview.services import complex_assembler, identifiers
from protoview.services.confidence import resolve_tier, tier_for
from protoview.services.deduplication import rank_origin

logger = logging.getLogger(__name__)

INSERTED = "inserted"
UPDATED = "updated"
SUPERSEDED = "superseded"

_AUXILIARY_COLUMNS = ("ipsae", "ipsae_confidence", "ipsae_pae_cutoff")


def _metric_values(record) -> dict:
    return {
        "iptm": record.primary_score,
        "contacts_pae_lt_3": record.contacts,
        "contacts_pae_lt_6": record.contacts_loose,
        "interface_plddt": record.interface_confidence,
        "ipsae": record.auxiliary_score,
        "ipsae_confidence": record.auxiliary_tier,
        "ipsae_pae_cutoff": record.auxiliary_pae_cutoff,
        "confidence": record.confidence_tier,
        "reported_band": record.reported_band,
        "alphafold_version": record.tool_generation,
        "analysis_version": record.schema_version,
        "source_path": record.source_origin,
    }


def _complex_extras(record: ComplexPredictionRecord) -> dict:
    return {
        "per_chain_plddt": record.per_chain_plddt,
        "ranking_score": record.ranking_score,
        "ptm": record.ptm,
        "mean_plddt": record.mean_plddt,
        "interface_residue_count": record.interface_residue_count,
    }


class ReconciliationWriter:
    """Writes canonical records into the store, keyed on their store key.

    Insert-first: a uniqueness collision is an update, not an error. On
    update the metrics are overwritten, stored ipSAE values survive an
    incoming record without them, and the schema version never regresses.

    A record whose duplicate-equivalence key is already held by a stored
    row from another source of equal or higher precedence is not inserted;
    it is counted as superseded. Re-ingesting an unchanged corpus therefore
    inserts and deletes nothing.

    With ``dry_run=True`` the writer does the same work but never commits:
    each file runs under a savepoint and :meth:`finish` rolls everything
    back, so the counts match what a real run would report.
    """

    def __init__(self, db: Session, dry_run: bool = False, batch_size: int | None = None):
        self.db = db
        self.dry_run = dry_run
        self.batch_size = batch_size or config.ingest.delete_batch_size
        self.inserted = 0
        self.updated = 0
        self.superseded = 0
        self.deleted = 0

    @property
    def counts(self) -> dict:
        return {
            "new": self.inserted,
            "updated": self.updated,
            "superseded": self.superseded,
            "deleted": self.deleted,
        }

    def write(self, record) -> str:
        record.confidence_tier = resolve_tier(record)
        if isinstance(record, ComplexPredictionRecord):
            outcome = self._write_complex(record)
        else:
            outcome = self._write_pairwise(record)
        if outcome == INSERTED:
            self.inserted += 1
        elif outcome == UPDATED:
            self.updated += 1
        else:
            self.superseded += 1
        return outcome

    # -- units of work ------------------------------------------------------

    def begin_unit(self):
        """Start one file's unit of work.

        In a dry run this opens a savepoint that :meth:`rollback` can return
        to. It is never released: on SQLite, releasing the outermost
        savepoint commits.
        """
        if self.dry_run:
            return self.db.begin_nested()
        return None

    def commit(self) -> None:
        if self.dry_run:
            self.db.flush()
        else:
            self.db.commit()

    def rollback(self, unit=None) -> None:
        if unit is not None:
            unit.rollback()
        else:
            self.db.rollback()

    def finish(self) -> None:
        """End the run; a dry run discards everything it wrote."""
        if self.dry_run:
            self.db.rollback()
        else:
            self.db.commit()

    # -- pairwise -----------------------------------------------------------

    def _write_pairwise(self, record: PredictionRecord) -> str:
        bait = identifiers.get_or_create_protein(
            self.db, record.bait_accession, record.bait_name, is_synthetic=record.synthetic
        )
        prey = identifiers.get_or_create_protein(
            self.db, record.prey_accession, record.prey_name, is_synthetic=record.synthetic
        )
        values = _metric_values(record)
        values.update(bait_protein_id=bait.protein_id, prey_protein_id=prey.protein_id)
        same_key = (
            Interaction.bait_protein_id == bait.protein_id,
            Interaction.prey_protein_id == prey.protein_id,
            Interaction.source_path == record.source_origin,
        )
        same_pair = (
            Interaction.bait_protein_id == bait.protein_id,
            Interaction.prey_protein_id == prey.protein_id,
        )
        return self._upsert(
            Interaction,
            record,
            values,
            same_key,
            same_pair,
            ["bait_protein_id", "prey_protein_id", "source_path"],
        )

    # -- complex ------------------------------------------------------------

    def _write_complex(self, record: ComplexPredictionRecord) -> str:
        members = [identifiers.get_or_create_protein(self.db, acc) for acc in record.bait_accessions]
        prey = identifiers.get_or_create_protein(self.db, record.prey_accession)
        cx = complex_assembler.get_or_create_complex(
            self.db, members, record.variant, record.bait_chains
        )
        values = _metric_values(record)
        values.update(_complex_extras(record))
        values.update(bait_complex_id=cx.complex_id, prey_protein_id=prey.protein_id)
        same_key = (
            ComplexInteraction.bait_complex_id == cx.complex_id,
            ComplexInteraction.prey_protein_id == prey.protein_id,
            ComplexInteraction.source_path == record.source_origin,
            ComplexInteraction.alphafold_version == record.tool_generation,
        )
        same_pair = (
            ComplexInteraction.bait_complex_id == cx.complex_id,
            ComplexInteraction.prey_protein_id == prey.protein_id,
        )
        return self._upsert(
            ComplexInteraction,
            record,
            values,
            same_key,
            same_pair,
            ["bait_complex_id", "prey_protein_id", "source_path", "alphafold_version"],
        )

    # -- shared -------------------------------------------------------------

    def _upsert(self, model, record, values: dict, same_key, same_pair, index_elements) -> str:
        row = self.db.execute(select(model).where(*same_key)).scalar_one_or_none()
        if row is None:
            if self._is_superseded(model, record, same_pair):
                logger.debug("Superseded %s record from %s", model.__tablename__, record.source_origin)
                return SUPERSEDED
            if identifiers.insert_ignore(self.db, model, values, index_elements):
                return INSERTED
            row = self.db.execute(select(model).where(*same_key)).scalar_one()
        self._apply_update(row, values)
        return UPDATED

    def _is_superseded(self, model, record, same_pair) -> bool:
        """True when another source already holds this measurement at equal or higher rank."""
        stored = self.db.execute(
            select(model.analysis_version, model.source_path).where(
                *same_pair,
                model.iptm == record.primary_score,
                func.coalesce(model.contacts_pae_lt_3, 0) == (record.contacts or 0),
                model.source_path != record.source_origin,
            )
        ).all()
        incoming = rank_origin(record.schema_version, record.source_origin)
        return any(rank_origin(version, path) >= incoming for version, path in stored)

    def _apply_update(self, row, values: dict) -> None:
        incoming_version = values.pop("analysis_version")
        if values.get("ipsae") is None:
            for column in _AUXILIARY_COLUMNS:
                values.pop(column, None)
        for column, value in values.items():
            setattr(row, column, value)
        row.analysis_version = SchemaVersion.latest(row.analysis_version, incoming_version)
        row.confidence = tier_for(
            row.alphafold_version,
            row.analysis_version,
            row.iptm,
            row.contacts_pae_lt_3,
            row.interface_plddt,
            row.reported_band,
        )
        self.db.flush()

    def delete_ids(self, model, ids) -> int:
        """Delete rows by primary key in bounded batches; absent ids are ignored.

        A dry run issues the same deletes but leaves them uncommitted.
        """
        ids = list(ids)
        if not ids:
            return 0

        pk = model.__mapper__.primary_key[0]
        removed = 0
        for start in range(0, len(ids), self.batch_size):
            batch = ids[start:start + self.batch_size]
            result = self.db.execute(
                delete(model).where(pk.in_(batch)).execution_options(synchronize_session=False)
            )
            removed += result.rowcount or 0
            if not self.dry_run:
                self.db.commit()
            logger.debug("Deleted batch of %d %s rows", len(batch), model.__tablename__)
        self.deleted += removed
        return removed
