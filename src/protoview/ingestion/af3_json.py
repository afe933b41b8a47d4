"""Parsers for AF3 pulldown analysis JSON (schema v3 and v4).

Two document families share one shape:

* ``AF3_PD_analysis_v*.json`` -- pairwise bait/prey predictions;
* ``AF3_bait_prey_analysis_v*.json`` -- multi-subunit bait complexes
  against a single prey.

Predictions live under ``high_confidence_predictions`` (v3) or
``filtered_predictions`` (v4). Each object is decoded through
:class:`PredictionEntry`; every default substitution is declared on that
model and nowhere else.
"""

from __future__ import annotations

import json
import logging
import string
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from protoview.exceptions import ParseError
from protoview.ingestion.base import SourceParser
from protoview.ingestion.records import ComplexPredictionRecord, PredictionRecord
from protoview.models import ACTIONABLE_BANDS, ConfidenceLevel, SchemaVersion, ToolGeneration
from protoview.services.complex_assembler import extract_variant
from protoview.services.confidence import resolve_auxiliary_tier
from protoview.services.identifiers import resolve_complex_roles, resolve_pair

logger = logging.getLogger(__name__)

DEFAULT_PAE_CUTOFF = 10.0


class PredictionEntry(BaseModel):
    """One object of the prediction array."""

    model_config = ConfigDict(extra="ignore")

    directory_name: str | None = None
    directory: str | None = None
    iptm: float
    contacts_pae3: int | None = None
    contacts_pae6: int | None = None
    mean_interface_plddt: float | None = None
    confidence_class: str | None = None
    # v4 only
    ipsae: float | None = None
    ipsae_confidence_class: str | None = None
    ipsae_pae_cutoff: float = DEFAULT_PAE_CUTOFF
    # multi-subunit documents
    bait_chains: list[str] | None = None
    prey_chains: list[str] | None = None
    chain_lengths: dict[str, Any] | None = None
    per_chain_interface_plddt: dict[str, Any] | None = None
    ranking_score: float | None = None
    ptm: float | None = None
    mean_plddt: float | None = None
    interface_residue_count: int | None = None

    @field_validator("ipsae_pae_cutoff", mode="before")
    @classmethod
    def _default_cutoff(cls, value):
        return DEFAULT_PAE_CUTOFF if value is None else value

    @model_validator(mode="after")
    def _require_token(self):
        if not self.token:
            raise ValueError("prediction has neither directory_name nor directory")
        return self

    @property
    def token(self) -> str:
        """Directory token naming the run; ``directory`` is the fallback."""
        return self.directory_name or self.directory or ""


class AnalysisDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str | None = None
    high_confidence_predictions: list[Any] | None = None
    filtered_predictions: list[Any] | None = None
    bait_chains: list[str] | None = None
    prey_chains: list[str] | None = None

    @property
    def predictions(self) -> list[Any]:
        if self.high_confidence_predictions is not None:
            return self.high_confidence_predictions
        return self.filtered_predictions or []


def detect_schema_version(document: AnalysisDocument, path: Path) -> SchemaVersion:
    """Version field first, then the array name, then the filename suffix."""
    version = (document.version or "").strip().lower()
    if version.startswith("v4"):
        return SchemaVersion.V4
    if version.startswith("v3"):
        return SchemaVersion.V3
    if document.filtered_predictions is not None:
        return SchemaVersion.V4
    if document.high_confidence_predictions is not None:
        return SchemaVersion.V3
    return SchemaVersion.V4 if path.name.endswith("v4.json") else SchemaVersion.V3


def is_store_eligible(schema: SchemaVersion, band: str | None) -> bool:
    """v3 keeps only the actionable bands; v4 drops only the lowest band."""
    if schema == SchemaVersion.V4:
        return band != ConfidenceLevel.VERY_LOW.value
    return band in ACTIONABLE_BANDS


class _AnalysisFile(SourceParser):
    def __init__(self, path: Path | str):
        super().__init__(path)
        self.schema_version: SchemaVersion | None = None

    def _load(self, text: str) -> AnalysisDocument:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON in {self.path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ParseError(f"Expected a JSON object at the top of {self.path}")
        try:
            document = AnalysisDocument.model_validate(raw)
        except ValidationError as exc:
            raise ParseError(f"Unrecognised document layout in {self.path}: {exc}") from exc
        self.schema_version = detect_schema_version(document, self.path)
        if not document.predictions:
            logger.warning("%s contains no predictions", self.path)
        return document

    def _entries(self, document: AnalysisDocument) -> Iterator[PredictionEntry]:
        for index, raw in enumerate(document.predictions):
            try:
                yield PredictionEntry.model_validate(raw)
            except ValidationError as exc:
                logger.debug("Skipping prediction %d in %s: %s", index, self.path, exc)
                self.stats.skipped_malformed += 1

    def _measurements(self, entry: PredictionEntry) -> dict:
        schema = self.schema_version
        values = dict(
            primary_score=entry.iptm,
            contacts=entry.contacts_pae3,
            contacts_loose=entry.contacts_pae6,
            interface_confidence=entry.mean_interface_plddt,
            tool_generation=ToolGeneration.CURRENT,
            schema_version=schema,
            directory=entry.token,
            reported_band=entry.confidence_class,
            store_eligible=is_store_eligible(schema, entry.confidence_class),
        )
        if schema == SchemaVersion.V4:
            values.update(
                auxiliary_score=entry.ipsae,
                auxiliary_tier=resolve_auxiliary_tier(entry.ipsae_confidence_class, entry.ipsae),
                auxiliary_pae_cutoff=entry.ipsae_pae_cutoff,
            )
        return values


class AF3PredictionFile(_AnalysisFile):
    """Pairwise AF3 analysis document (``AF3_PD_analysis_v*.json``)."""

    format_name = "json"

    def _records(self, text: str) -> Iterator[PredictionRecord]:
        document = self._load(text)
        for entry in self._entries(document):
            pair = resolve_pair(entry.token)
            if pair is None:
                self.stats.skipped_unresolved += 1
                continue
            self.stats.parsed += 1
            yield PredictionRecord(
                bait_accession=pair[0],
                prey_accession=pair[1],
                source_origin=str(self.path),
                **self._measurements(entry),
            )


class AF3ComplexFile(_AnalysisFile):
    """Multi-subunit AF3 analysis document (``AF3_bait_prey_analysis_v*.json``).

    The construct variant comes from *variant* when given, otherwise from
    markers in the directory token or the file's path components.
    """

    format_name = "complex"

    def __init__(self, path: Path | str, variant: str | None = None):
        super().__init__(path)
        self.variant = variant

    def _records(self, text: str) -> Iterator[ComplexPredictionRecord]:
        document = self._load(text)
        for entry in self._entries(document):
            roles = resolve_complex_roles(entry.token)
            if roles is None:
                self.stats.skipped_unresolved += 1
                continue
            bait, prey = roles
            bait_chains, prey_chains = infer_chains(entry, document, len(bait))
            origin = self.path.parent / entry.directory if entry.directory else self.path.parent

            self.stats.parsed += 1
            yield ComplexPredictionRecord(
                bait_accessions=tuple(bait),
                prey_accession=prey,
                bait_chains=tuple(bait_chains),
                prey_chains=tuple(prey_chains),
                variant=self.variant or extract_variant(entry.token, str(self.path)),
                per_chain_plddt=dict(entry.per_chain_interface_plddt or {}),
                ranking_score=entry.ranking_score,
                ptm=entry.ptm,
                mean_plddt=entry.mean_plddt,
                interface_residue_count=entry.interface_residue_count,
                source_origin=str(origin),
                **self._measurements(entry),
            )


def infer_chains(
    entry: PredictionEntry, document: AnalysisDocument, n_bait: int
) -> tuple[list[str], list[str]]:
    """Bait/prey chain ids: explicit arrays, else sorted chain_lengths, else A, B, C..."""
    bait = entry.bait_chains or document.bait_chains
    prey = entry.prey_chains or document.prey_chains
    if bait and prey:
        return list(bait), list(prey)

    if entry.chain_lengths:
        chains = sorted(entry.chain_lengths)
        if len(chains) >= 2:
            return list(bait or chains[:-1]), list(prey or chains[-1:])

    letters = string.ascii_uppercase
    if not bait:
        bait = [letters[i % 26] for i in range(n_bait)]
    if not prey:
        prey = [letters[n_bait % 26]]
    return list(bait), list(prey)
