"""Canonical prediction records emitted by every format parser -- no DB access."""

from __future__ import annotations

from dataclasses import dataclass, field

from protoview.models import AuxiliaryTier, ConfidenceLevel, SchemaVersion, ToolGeneration


@dataclass(kw_only=True)
class _Measurement:
    primary_score: float                      # iptm, 0..1
    tool_generation: ToolGeneration
    schema_version: SchemaVersion
    source_origin: str                        # distinguishes independent runs
    directory: str = ""
    contacts: int | None = None               # PAE < 3 A
    contacts_loose: int | None = None         # PAE < 6 A (5 A for AF2)
    interface_confidence: float | None = None  # mean interface pLDDT, 0..100
    auxiliary_score: float | None = None      # ipSAE, v4 only
    auxiliary_tier: AuxiliaryTier | None = None
    auxiliary_pae_cutoff: float | None = None
    reported_band: str | None = None          # band as written by the producer
    store_eligible: bool = True
    confidence_tier: ConfidenceLevel | None = None  # derived, see services.confidence


@dataclass(kw_only=True)
class PredictionRecord(_Measurement):
    """One pairwise bait/prey prediction."""

    bait_accession: str
    prey_accession: str
    bait_name: str | None = None
    prey_name: str | None = None
    synthetic: bool = False

    @property
    def store_key(self) -> tuple[str, str, str]:
        return (self.bait_accession, self.prey_accession, self.source_origin)

    @property
    def duplicate_key(self) -> tuple[str, str, float, int]:
        return (self.bait_accession, self.prey_accession, self.primary_score, self.contacts or 0)


@dataclass(kw_only=True)
class ComplexPredictionRecord(_Measurement):
    """One multi-subunit bait (complex) against a single prey."""

    bait_accessions: tuple[str, ...]
    prey_accession: str
    bait_chains: tuple[str, ...] = ()
    prey_chains: tuple[str, ...] = ()
    variant: str = "FL"
    per_chain_plddt: dict = field(default_factory=dict)
    ranking_score: float | None = None
    ptm: float | None = None
    mean_plddt: float | None = None
    interface_residue_count: int | None = None

    @property
    def complex_key(self) -> str:
        return "_".join(sorted(self.bait_accessions) + [self.variant])


@dataclass
class ParseStats:
    parsed: int = 0
    skipped_malformed: int = 0
    skipped_unresolved: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_malformed + self.skipped_unresolved
