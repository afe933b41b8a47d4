"""Complex assembler -- multi-subunit bait identities and their labels."""

from __future__ import annotations

import logging
import re
import string

from sqlalchemy import select
from sqlalchemy.orm import Session

from protoview.db.models.complex import ComplexMember, ProteinComplex
from protoview.db.models.protein import Protein

logger = logging.getLogger(__name__)

DEFAULT_VARIANT = "FL"

_FL_RE = re.compile(r"(^|_)FL(_|$)")


def extract_variant(*locations: str) -> str:
    """Construct variant from markers in directory tokens or path components.

    ``Hs_Cter_IFT52_46`` -> ``Cterm``; ``Hs_Nter_IFT52_46`` -> ``Nterm``;
    anything else, including an explicit ``FL``, -> ``FL``.
    """
    for location in locations:
        for part in re.split(r"[\\/]", location or ""):
            if "Cter" in part:
                return "Cterm"
            if "Nter" in part:
                return "Nterm"
            if _FL_RE.search(part):
                return DEFAULT_VARIANT
    return DEFAULT_VARIANT


def complex_key(accessions, variant: str = DEFAULT_VARIANT) -> str:
    """Sorted member accessions plus variant, e.g. ``Q9NQC8_Q9Y366_FL``."""
    return "_".join(sorted(accessions) + [variant])


def build_display_label(names, variant: str = DEFAULT_VARIANT) -> str:
    label = " & ".join(names)
    if variant != DEFAULT_VARIANT:
        label = f"{label} ({variant})"
    return label


def group_by_complex(records) -> dict[str, list]:
    """Group multi-subunit records by complex key, preserving input order."""
    groups: dict[str, list] = {}
    for record in records:
        groups.setdefault(record.complex_key, []).append(record)
    return groups


def get_or_create_complex(
    db: Session,
    members: list[Protein],
    variant: str = DEFAULT_VARIANT,
    chains: list[str] | tuple[str, ...] = (),
) -> ProteinComplex:
    """Return the complex for *members* + *variant*, creating it once.

    Membership is fixed at creation; re-creating an existing key is a no-op.
    """
    key = complex_key([p.accession for p in members], variant)
    cx = find_complex(db, key)
    if cx is not None:
        return cx

    cx = ProteinComplex(
        complex_key=key,
        variant=variant,
        display_name=build_display_label([p.label for p in members], variant),
        num_proteins=len(members),
    )
    db.add(cx)
    db.flush()
    for position, protein in enumerate(members):
        chain = chains[position] if position < len(chains) else string.ascii_uppercase[position % 26]
        link_member(db, cx, protein, chain, position)
    logger.info("Created complex %s with %d members", key, len(members))
    return cx


def link_member(
    db: Session, cx: ProteinComplex, protein: Protein, chain_id: str, position: int
) -> ComplexMember:
    """Idempotent on (complex, protein, chain)."""
    member = db.execute(
        select(ComplexMember).where(
            ComplexMember.complex_id == cx.complex_id,
            ComplexMember.protein_id == protein.protein_id,
            ComplexMember.chain_id == chain_id,
        )
    ).scalar_one_or_none()
    if member is None:
        member = ComplexMember(
            complex_id=cx.complex_id,
            protein_id=protein.protein_id,
            chain_id=chain_id,
            position=position,
            role="bait",
        )
        db.add(member)
        db.flush()
    return member


def find_complex(db: Session, key: str) -> ProteinComplex | None:
    return db.execute(
        select(ProteinComplex).where(ProteinComplex.complex_key == key)
    ).scalar_one_or_none()


def refresh_complex_labels(db: Session) -> int:
    """Recompute every complex display label from current member names."""
    updated = 0
    for cx in db.execute(select(ProteinComplex)).scalars():
        names = [m.protein.label for m in cx.members]
        if not names:
            continue
        label = build_display_label(names, cx.variant)
        if cx.display_name != label:
            cx.display_name = label
            updated += 1
    db.commit()
    logger.info("Refreshed %d complex labels", updated)
    return updated
