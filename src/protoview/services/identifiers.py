"""Identifier normalizer -- accession extraction, role resolution, protein identities."""

from __future__ import annotations

import logging
import re

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from protoview.db.models.protein import Protein

logger = logging.getLogger(__name__)

ACCESSION_RE = re.compile(r"[OPQAB][0-9][A-Z0-9]{4}", re.IGNORECASE)
PSEUDO_PREFIX = "AF2_"


def extract_accessions(token: str) -> list[str]:
    """Return accession-like substrings of *token*, uppercased, deduplicated, in order."""
    seen: list[str] = []
    for match in ACCESSION_RE.findall(token or ""):
        acc = match.upper()
        if acc not in seen:
            seen.append(acc)
    return seen


def synthesize_pseudo_accessions(directory: str) -> tuple[str, str] | None:
    """Namespaced bait/prey identities for legacy tokens without accessions.

    ``Cr54N_and_Cre01.g032150.t1.1`` -> (``AF2_Cr54N``, ``AF2_Cre01.g032150.t1.1``);
    ``81CH_abTub`` -> (``AF2_81CH``, ``AF2_abTub``). A single-part token
    pairs with itself.
    """
    if not directory:
        return None
    if "_and_" in directory:
        parts = directory.split("_and_")
    else:
        parts = directory.split("_")
    bait = parts[0] or directory
    prey = parts[1] if len(parts) > 1 and parts[1] else bait
    return PSEUDO_PREFIX + bait, PSEUDO_PREFIX + prey


def resolve_pair(token: str) -> tuple[str, str] | None:
    """Bait/prey for a pairwise token, or None if fewer than two accessions."""
    accessions = extract_accessions(token)
    if len(accessions) < 2:
        return None
    return accessions[0], accessions[1]


def resolve_complex_roles(token: str) -> tuple[list[str], str] | None:
    """Bait accessions (before ``_with_``) and the single prey accession."""
    bait_part = token.split("_with_")[0]
    bait = extract_accessions(bait_part)
    prey = [acc for acc in extract_accessions(token) if acc not in bait]
    if not bait or not prey:
        return None
    return bait, prey[0]


def insert_ignore(db: Session, model, values: dict, index_elements: list[str]):
    """Dialect INSERT ... ON CONFLICT DO NOTHING; returns the rowcount."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model)
    else:
        raise NotImplementedError(f"Unsupported store dialect: {dialect}")
    stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=index_elements)
    return db.execute(stmt).rowcount


def get_or_create_protein(
    db: Session,
    accession: str,
    display_name: str | None = None,
    *,
    is_synthetic: bool = False,
) -> Protein:
    """Return the Protein for *accession*, creating it on first reference.

    Insert-first: a natural-key collision means another writer got there
    first, and the existing row is used. A missing display name is filled
    in; an existing one is never overwritten.
    """
    inserted = insert_ignore(
        db,
        Protein,
        {
            "accession": accession,
            "display_name": display_name,
            "is_synthetic": is_synthetic,
        },
        ["accession"],
    )
    protein = db.execute(
        select(Protein).where(Protein.accession == accession)
    ).scalar_one()
    if inserted:
        logger.debug("Created protein %s", accession)
    elif display_name and not protein.display_name:
        protein.display_name = display_name
    return protein
