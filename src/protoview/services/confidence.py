"""Confidence classifier.

All tier logic lives here. Two independent, total, pure schemes:

* the interface-quality scheme over (iptm, contacts at PAE < 3 A,
  mean interface pLDDT), used for every JSON-derived record;
* the ipSAE scheme (schema v4 only), stored alongside as the auxiliary tier.

Legacy annotated-report records keep the band printed by the producer, and
AF2 pulldown records carry no derived tier at all. :func:`reclassify_all`
recomputes stored tiers so a rule change can be replayed over the store.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from protoview.db.models.complex import ComplexInteraction
from protoview.db.models.interaction import Interaction
from protoview.models import AuxiliaryTier, ConfidenceLevel, SchemaVersion, ToolGeneration

logger = logging.getLogger(__name__)

_AUXILIARY_LABELS = {
    "high confidence": AuxiliaryTier.HIGH,
    "high": AuxiliaryTier.HIGH,
    "medium confidence": AuxiliaryTier.MEDIUM,
    "medium": AuxiliaryTier.MEDIUM,
    "low/ambiguous": AuxiliaryTier.LOW,
    "low confidence": AuxiliaryTier.LOW,
    "low": AuxiliaryTier.LOW,
    "very low": AuxiliaryTier.VERY_LOW,
}


def classify_interface_quality(
    primary: float | None,
    contacts: int | None,
    interface_confidence: float | None,
) -> ConfidenceLevel:
    """High / Medium / Low from iptm, strict contacts and interface pLDDT.

    Missing values count as zero. Very few contacts veto High unless iptm
    is at least 0.75.
    """
    iptm = primary or 0.0
    n = contacts or 0
    iplddt = interface_confidence or 0.0

    meets_high = (
        iptm >= 0.70
        or (n >= 40 and iplddt >= 80)
        or (n >= 30 and iptm >= 0.50 and iplddt >= 80)
    )
    excluded = iptm < 0.75 and n < 5
    if meets_high and not excluded:
        return ConfidenceLevel.HIGH

    if iptm >= 0.60 or (n >= 20 and iplddt >= 75) or (n >= 15 and iptm >= 0.45):
        return ConfidenceLevel.MEDIUM

    return ConfidenceLevel.LOW


def classify_auxiliary_score(score: float) -> AuxiliaryTier:
    if score > 0.70:
        return AuxiliaryTier.HIGH
    if score >= 0.50:
        return AuxiliaryTier.MEDIUM
    if score >= 0.30:
        return AuxiliaryTier.LOW
    return AuxiliaryTier.VERY_LOW


def normalize_auxiliary_class(label: str | None) -> AuxiliaryTier | None:
    """Map a producer ipSAE label (e.g. ``Low/Ambiguous``) onto the enum."""
    if not label:
        return None
    tier = _AUXILIARY_LABELS.get(label.strip().lower())
    if tier is None:
        logger.warning("Unrecognised ipSAE class %r", label)
    return tier


def resolve_auxiliary_tier(label: str | None, score: float | None) -> AuxiliaryTier | None:
    """Producer label wins; the score rule fills in when no usable label exists."""
    tier = normalize_auxiliary_class(label)
    if tier is None and score is not None:
        tier = classify_auxiliary_score(score)
    return tier


def tier_for(
    tool_generation: ToolGeneration | str,
    schema_version: SchemaVersion | str,
    primary: float | None,
    contacts: int | None,
    interface_confidence: float | None,
    reported_band: str | None,
) -> ConfidenceLevel | None:
    """Tier from the stored fields alone, with no hidden state."""
    schema = SchemaVersion(schema_version)
    if schema in (SchemaVersion.V3, SchemaVersion.V4):
        return classify_interface_quality(primary, contacts, interface_confidence)
    if ToolGeneration(tool_generation) == ToolGeneration.LEGACY:
        return None
    if reported_band:
        try:
            return ConfidenceLevel(reported_band)
        except ValueError:
            logger.warning("Unrecognised report band %r", reported_band)
    return ConfidenceLevel.UNKNOWN


def resolve_tier(record) -> ConfidenceLevel | None:
    """Tier for a canonical record (pairwise or complex)."""
    return tier_for(
        record.tool_generation,
        record.schema_version,
        record.primary_score,
        record.contacts,
        record.interface_confidence,
        record.reported_band,
    )


def _row_tier(row) -> ConfidenceLevel | None:
    return tier_for(
        row.alphafold_version,
        row.analysis_version,
        row.iptm,
        row.contacts_pae_lt_3,
        row.interface_plddt,
        row.reported_band,
    )


def reclassify_all(db: Session, dry_run: bool = False) -> dict:
    """Recompute the stored tier of every interaction and complex interaction."""
    examined = 0
    changed = 0
    for model in (Interaction, ComplexInteraction):
        for row in db.execute(select(model)).scalars():
            examined += 1
            tier = _row_tier(row)
            if row.confidence != tier:
                changed += 1
                if not dry_run:
                    row.confidence = tier
    if dry_run:
        db.rollback()
    else:
        db.commit()
    logger.info("Reclassified %d of %d rows", changed, examined)
    return {"examined": examined, "changed": changed, "dry_run": dry_run}
