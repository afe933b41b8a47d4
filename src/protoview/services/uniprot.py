"""UniProt REST API adapter -- alias and organism enrichment.

Docs: https://www.uniprot.org/help/api

Accessions are looked up in fixed-size batches, strictly one after another
with a pause between batches. A failed batch is logged and skipped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session

from protoview.config import config
from protoview.db.models.protein import Protein, ProteinAlias
from protoview.exceptions import LookupServiceError
from protoview.services.identifiers import PSEUDO_PREFIX, insert_ignore

logger = logging.getLogger(__name__)

_BASE = config.uniprot.base_url
_FIELDS = "accession,gene_names,protein_name,organism_name"

ORGANISM_CODES = {
    "Homo sapiens": "Hs",
    "Chlamydomonas reinhardtii": "Cr",
}


async def fetch_batch(http: httpx.AsyncClient, accessions: list[str]) -> list[dict[str, Any]]:
    """Fetch UniProt entries for up to one batch of accessions."""
    try:
        resp = await http.get(
            f"{_BASE}/uniprotkb/accessions",
            params={"accessions": ",".join(accessions), "format": "json", "fields": _FIELDS},
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise LookupServiceError(f"UniProt lookup failed: {exc}") from exc
    return resp.json().get("results", [])


def extract_aliases(entry: dict) -> list[tuple[str, str]]:
    """(alias, alias_type) pairs: gene names, synonyms and protein names."""
    aliases = []
    for gene in entry.get("genes", []):
        name = gene.get("geneName", {}).get("value")
        if name:
            aliases.append((name, "gene_name"))
        for synonym in gene.get("synonyms", []):
            if synonym.get("value"):
                aliases.append((synonym["value"], "gene_synonym"))

    description = entry.get("proteinDescription", {})
    recommended = description.get("recommendedName", {})
    full = recommended.get("fullName", {}).get("value")
    if full:
        aliases.append((full, "protein_name"))
    for short in recommended.get("shortNames", []):
        if short.get("value"):
            aliases.append((short["value"], "short_name"))
    for alt in description.get("alternativeNames", []):
        value = alt.get("fullName", {}).get("value")
        if value:
            aliases.append((value, "alternative_name"))
    return aliases


def extract_gene_name(entry: dict) -> str | None:
    for gene in entry.get("genes", []):
        name = gene.get("geneName", {}).get("value")
        if name:
            return name
    return None


def extract_organism(entry: dict) -> tuple[str | None, str | None]:
    """Scientific name and short code (``Hs``, ``Cr``) when known."""
    name = entry.get("organism", {}).get("scientificName")
    return name, ORGANISM_CODES.get(name)


def apply_entry(db: Session, protein: Protein, entry: dict) -> int:
    """Store aliases and organism from one entry; returns aliases added."""
    added = 0
    seen = set()
    for alias, alias_type in extract_aliases(entry):
        alias = alias.strip()[:255]
        if not alias or alias in seen:
            continue
        seen.add(alias)
        added += insert_ignore(
            db,
            ProteinAlias,
            {"protein_id": protein.protein_id, "alias_name": alias, "alias_type": alias_type, "source": "uniprot"},
            ["protein_id", "alias_name"],
        )

    organism, code = extract_organism(entry)
    if organism:
        protein.organism = organism
        protein.organism_code = code
    if not protein.display_name:
        protein.display_name = extract_gene_name(entry)
    return added


def _classify_synthetic(protein: Protein) -> None:
    # AF2 runs named Cre* are Chlamydomonas gene models
    if protein.organism is None and protein.accession.startswith(PSEUDO_PREFIX + "Cre"):
        protein.organism = "Chlamydomonas reinhardtii"
        protein.organism_code = "Cr"


async def enrich_proteins(
    db: Session,
    limit: int | None = None,
    http: httpx.AsyncClient | None = None,
) -> dict:
    """Fill aliases and organism for proteins that lack them."""
    stmt = select(Protein).where(Protein.organism.is_(None)).order_by(Protein.protein_id)
    proteins = list(db.execute(stmt).scalars())

    for protein in proteins:
        if protein.is_synthetic or protein.accession.startswith(PSEUDO_PREFIX):
            _classify_synthetic(protein)
    proteins = [
        p for p in proteins
        if not (p.is_synthetic or p.accession.startswith(PSEUDO_PREFIX))
    ]
    if limit:
        proteins = proteins[:limit]

    summary = {"requested": len(proteins), "enriched": 0, "aliases": 0, "failed_batches": 0}
    batch_size = config.uniprot.batch_size
    own_client = http is None
    if own_client:
        http = httpx.AsyncClient(
            timeout=30.0,
            headers={"Accept": "application/json", "User-Agent": config.uniprot.user_agent},
        )
    try:
        for start in range(0, len(proteins), batch_size):
            if start:
                await asyncio.sleep(config.uniprot.batch_delay)
            batch = proteins[start:start + batch_size]
            by_accession = {p.accession: p for p in batch}
            try:
                entries = await fetch_batch(http, list(by_accession))
            except LookupServiceError as exc:
                logger.warning("Skipping batch at offset %d: %s", start, exc)
                summary["failed_batches"] += 1
                continue
            for entry in entries:
                protein = by_accession.get(entry.get("primaryAccession", ""))
                if protein is None:
                    continue
                summary["aliases"] += apply_entry(db, protein, entry)
                summary["enriched"] += 1
            db.commit()
    finally:
        if own_client:
            await http.aclose()

    db.commit()
    logger.info(
        "Enriched %d of %d proteins (%d aliases, %d failed batches)",
        summary["enriched"], summary["requested"], summary["aliases"], summary["failed_batches"],
    )
    return summary
