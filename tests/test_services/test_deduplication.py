import itertools

from protoview.db.models.interaction import Interaction
from protoview.db.models.protein import Protein
from protoview.models import SchemaVersion, ToolGeneration
from protoview.services.deduplication import (
    Candidate,
    deduplicate,
    interaction_candidates,
    origin_rank,
    plan_deduplication,
    rank_origin,
)
from protoview.services.reconciliation import ReconciliationWriter

KEY = ("Q9P2L0", "Q13635", 0.5, 20)


def test_origin_rank_schema_then_suffix():
    assert origin_rank(Candidate(1, KEY, "v4")) == 2
    assert origin_rank(Candidate(1, KEY, "v3", "/x/AF3_PD_analysis_v4.json")) == 1
    assert origin_rank(Candidate(1, KEY, None, "/x/AF3_PD_analysis_v4.json")) == 2
    assert origin_rank(Candidate(1, KEY, None, "/x/AF3_PD_analysis_v3.json")) == 1
    assert origin_rank(Candidate(1, KEY, "text", "/data/AF3_APD/IFT121")) == 0


def test_v4_origin_survives_v3_duplicate():
    plan = plan_deduplication([
        Candidate(11, KEY, None, "/runs/AF3_PD_analysis_v3.json"),
        Candidate(12, KEY, None, "/runs/AF3_PD_analysis_v4.json"),
    ])
    assert plan.duplicate_groups == 1
    assert plan.keep == [12]
    assert plan.delete == [11]


def test_precedence_regardless_of_order():
    candidates = [
        Candidate(30, KEY, "text", "/data/AF3_APD/IFT121"),
        Candidate(10, KEY, "v4", "/runs/AF3_PD_analysis_v4.json"),
        Candidate(20, KEY, "v3", "/runs/AF3_PD_analysis_v3.json"),
    ]
    for ordering in itertools.permutations(candidates):
        plan = plan_deduplication(ordering)
        assert plan.keep == [10]
        assert sorted(plan.delete) == [20, 30]


def test_tie_break_highest_id():
    plan = plan_deduplication([
        Candidate(4, KEY, "v4", "/a/AF3_PD_analysis_v4.json"),
        Candidate(9, KEY, "v4", "/b/AF3_PD_analysis_v4.json"),
        Candidate(6, KEY, "v4", "/c/AF3_PD_analysis_v4.json"),
    ])
    assert plan.keep == [9]
    assert sorted(plan.delete) == [4, 6]


def test_distinct_keys_are_not_grouped():
    plan = plan_deduplication([
        Candidate(1, KEY, "v3"),
        Candidate(2, ("Q9P2L0", "Q13635", 0.51, 20), "v4"),
        Candidate(3, ("Q9P2L0", "Q13635", 0.5, 21), "v4"),
    ])
    assert plan.duplicate_groups == 0
    assert plan.delete == []


def test_plan_is_idempotent():
    candidates = [
        Candidate(1, KEY, "v3"),
        Candidate(2, KEY, "v4"),
        Candidate(3, ("P12345", "Q13635", 0.3, 0), "text"),
    ]
    plan = plan_deduplication(candidates)
    survivors = [c for c in candidates if c.record_id not in plan.delete]
    assert plan_deduplication(survivors).duplicate_groups == 0


def _seed(db):
    bait = Protein(accession="Q9P2L0")
    prey = Protein(accession="Q13635")
    other = Protein(accession="P12345")
    db.add_all([bait, prey, other])
    db.flush()
    rows = [
        Interaction(bait_protein_id=bait.protein_id, prey_protein_id=prey.protein_id, iptm=0.5,
                    contacts_pae_lt_3=20, alphafold_version=ToolGeneration.CURRENT,
                    analysis_version=SchemaVersion.V3, source_path="/runs/AF3_PD_analysis_v3.json"),
        Interaction(bait_protein_id=bait.protein_id, prey_protein_id=prey.protein_id, iptm=0.5,
                    contacts_pae_lt_3=20, alphafold_version=ToolGeneration.CURRENT,
                    analysis_version=SchemaVersion.V4, source_path="/runs/AF3_PD_analysis_v4.json"),
        Interaction(bait_protein_id=other.protein_id, prey_protein_id=prey.protein_id, iptm=0.3,
                    contacts_pae_lt_3=None, alphafold_version=ToolGeneration.CURRENT,
                    analysis_version=SchemaVersion.TEXT, source_path="/data/AF3_APD/A"),
        Interaction(bait_protein_id=other.protein_id, prey_protein_id=prey.protein_id, iptm=0.3,
                    contacts_pae_lt_3=0, alphafold_version=ToolGeneration.CURRENT,
                    analysis_version=SchemaVersion.TEXT, source_path="/data/AF3_APD/B"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


def test_null_contacts_group_with_zero(store):
    rows = _seed(store)
    plan = plan_deduplication(interaction_candidates(store))
    assert plan.duplicate_groups == 2
    assert rows[3].interaction_id in plan.keep
    assert rows[2].interaction_id in plan.delete


def test_candidates_scoped_to_accession(store):
    _seed(store)
    assert len(interaction_candidates(store, "q9p2l0")) == 2
    assert len(interaction_candidates(store, "Q13635")) == 4
    assert interaction_candidates(store, "O00000") == []


def test_deduplicate_then_second_run_finds_nothing(store):
    rows = _seed(store)
    writer = ReconciliationWriter(store)
    result = deduplicate(store, writer)
    assert result == {"duplicate_groups": 2, "deleted": 2}
    remaining = {r.interaction_id for r in store.query(Interaction).all()}
    assert remaining == {rows[1].interaction_id, rows[3].interaction_id}

    again = deduplicate(store, ReconciliationWriter(store))
    assert again == {"duplicate_groups": 0, "deleted": 0}


def test_deduplicate_dry_run_deletes_nothing(store):
    _seed(store)
    writer = ReconciliationWriter(store, dry_run=True)
    result = deduplicate(store, writer)
    writer.finish()
    assert result["deleted"] == 2
    assert store.query(Interaction).count() == 4


def test_rank_origin_matches_candidate_rank():
    assert rank_origin(SchemaVersion.V4, "/data/AF3_APD/IFT121") == 2
    assert rank_origin(None, "/runs/AF3_PD_analysis_v3.json") == 1
    assert rank_origin(SchemaVersion.TEXT, "/data/AF3_APD/IFT121") == 0
