import itertools
import random

import pytest

from protoview.db.models.interaction import Interaction
from protoview.db.models.protein import Protein
from protoview.ingestion.records import PredictionRecord
from protoview.models import AuxiliaryTier, ConfidenceLevel, SchemaVersion, ToolGeneration
from protoview.services.confidence import (
    classify_auxiliary_score,
    classify_interface_quality,
    normalize_auxiliary_class,
    reclassify_all,
    resolve_auxiliary_tier,
    resolve_tier,
)


def _record(**kwargs):
    values = dict(
        bait_accession="Q9P2L0",
        prey_accession="Q13635",
        primary_score=0.5,
        tool_generation=ToolGeneration.CURRENT,
        schema_version=SchemaVersion.V4,
        source_origin="/runs/AF3_PD_analysis_v4.json",
    )
    values.update(kwargs)
    return PredictionRecord(**values)


def test_boundary_high_at_070():
    assert classify_interface_quality(0.70, 5, 0) == ConfidenceLevel.HIGH
    assert classify_interface_quality(0.699999, 5, 0) == ConfidenceLevel.MEDIUM


def test_boundary_without_contacts_falls_through():
    # Under five contacts the 0.70 High threshold is vetoed below 0.75
    assert classify_interface_quality(0.70, 0, 0) == ConfidenceLevel.MEDIUM
    assert classify_interface_quality(0.599999, 0, 0) == ConfidenceLevel.LOW


def test_few_contacts_veto_high_below_075():
    assert classify_interface_quality(0.74, 3, 70.0) == ConfidenceLevel.MEDIUM
    assert classify_interface_quality(0.75, 3, 70.0) == ConfidenceLevel.HIGH


def test_high_via_interface():
    assert classify_interface_quality(0.2, 40, 80.0) == ConfidenceLevel.HIGH
    assert classify_interface_quality(0.5, 30, 80.0) == ConfidenceLevel.HIGH
    assert classify_interface_quality(0.49, 30, 80.0) == ConfidenceLevel.MEDIUM


def test_medium_paths():
    assert classify_interface_quality(0.60, 0, None) == ConfidenceLevel.MEDIUM
    assert classify_interface_quality(0.1, 20, 75.0) == ConfidenceLevel.MEDIUM
    assert classify_interface_quality(0.45, 15, None) == ConfidenceLevel.MEDIUM
    assert classify_interface_quality(0.44, 15, None) == ConfidenceLevel.LOW


def test_nulls_coerce_to_zero():
    assert classify_interface_quality(None, None, None) == ConfidenceLevel.LOW


def test_deterministic_regardless_of_call_order():
    inputs = list(itertools.product([0.3, 0.5, 0.7, 0.8], [0, 4, 16, 45], [None, 76.0, 85.0]))
    expected = [classify_interface_quality(*args) for args in inputs]
    shuffled = list(enumerate(inputs))
    random.Random(7).shuffle(shuffled)
    for index, args in shuffled:
        assert classify_interface_quality(*args) == expected[index]


@pytest.mark.parametrize("score, tier", [
    (0.71, AuxiliaryTier.HIGH),
    (0.70, AuxiliaryTier.MEDIUM),
    (0.50, AuxiliaryTier.MEDIUM),
    (0.49, AuxiliaryTier.LOW),
    (0.30, AuxiliaryTier.LOW),
    (0.279, AuxiliaryTier.VERY_LOW),
])
def test_classify_auxiliary_score(score, tier):
    assert classify_auxiliary_score(score) == tier


def test_normalize_auxiliary_class():
    assert normalize_auxiliary_class("High Confidence") == AuxiliaryTier.HIGH
    assert normalize_auxiliary_class("medium confidence") == AuxiliaryTier.MEDIUM
    assert normalize_auxiliary_class("Low/Ambiguous") == AuxiliaryTier.LOW
    assert normalize_auxiliary_class("Low Confidence") == AuxiliaryTier.LOW
    assert normalize_auxiliary_class("Very Low") == AuxiliaryTier.VERY_LOW
    assert normalize_auxiliary_class(None) is None
    assert normalize_auxiliary_class("Stellar") is None


def test_auxiliary_label_wins_over_score():
    assert resolve_auxiliary_tier("Low/Ambiguous", 0.279) == AuxiliaryTier.LOW
    assert resolve_auxiliary_tier(None, 0.279) == AuxiliaryTier.VERY_LOW
    rec = _record(primary_score=0.468, auxiliary_score=0.279)
    assert resolve_tier(rec) == ConfidenceLevel.LOW


def test_resolve_tier_by_provenance():
    json_rec = _record(primary_score=0.82, contacts=55, interface_confidence=85.5,
                       reported_band="Worth Investigating")
    assert resolve_tier(json_rec) == ConfidenceLevel.HIGH

    text_rec = _record(primary_score=0.47, contacts=30, schema_version=SchemaVersion.TEXT,
                       reported_band="Very High Confidence")
    assert resolve_tier(text_rec) == ConfidenceLevel.VERY_HIGH_CONFIDENCE

    af2_rec = _record(tool_generation=ToolGeneration.LEGACY, schema_version=SchemaVersion.PULLDOWN,
                      reported_band="Very High")
    assert resolve_tier(af2_rec) is None


def _seed_interaction(db, **kwargs):
    bait = Protein(accession="Q9P2L0")
    prey = Protein(accession="Q13635")
    db.add_all([bait, prey])
    db.flush()
    values = dict(
        bait_protein_id=bait.protein_id,
        prey_protein_id=prey.protein_id,
        iptm=0.82,
        contacts_pae_lt_3=55,
        interface_plddt=85.5,
        confidence=ConfidenceLevel.LOW,
        alphafold_version=ToolGeneration.CURRENT,
        analysis_version=SchemaVersion.V3,
        source_path="/runs/AF3_PD_analysis_v3.json",
    )
    values.update(kwargs)
    row = Interaction(**values)
    db.add(row)
    db.commit()
    return row


def test_reclassify_all_is_idempotent(store):
    row = _seed_interaction(store)
    first = reclassify_all(store)
    assert first["changed"] == 1
    store.refresh(row)
    assert row.confidence == ConfidenceLevel.HIGH
    second = reclassify_all(store)
    assert second["changed"] == 0


def test_reclassify_dry_run_leaves_store(store):
    row = _seed_interaction(store)
    result = reclassify_all(store, dry_run=True)
    assert result["changed"] == 1
    store.refresh(row)
    assert row.confidence == ConfidenceLevel.LOW
