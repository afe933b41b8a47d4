"""Multi-subunit bait complexes and their prey interactions."""

from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protoview.db.models.base import Base, JSONPayload, TimestampMixin, value_enum
from protoview.models import AuxiliaryTier, ConfidenceLevel, SchemaVersion, ToolGeneration


class ProteinComplex(TimestampMixin, Base):
    __tablename__ = "protein_complexes"

    complex_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Sorted member accessions + variant, e.g. "Q9NQC8_Q9Y366_Cterm"
    complex_key: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    variant: Mapped[str] = mapped_column(String(100), default="FL")
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    num_proteins: Mapped[int] = mapped_column(Integer, default=0)

    members: Mapped[list["ComplexMember"]] = relationship(
        back_populates="complex",
        cascade="all, delete-orphan",
        order_by="ComplexMember.position",
    )
    interactions: Mapped[list["ComplexInteraction"]] = relationship(
        back_populates="complex", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ProteinComplex {self.complex_key} ({self.num_proteins} proteins)>"


class ComplexMember(Base):
    __tablename__ = "complex_proteins"
    __table_args__ = (UniqueConstraint("complex_id", "protein_id", "chain_id"),)

    member_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    complex_id: Mapped[int] = mapped_column(
        ForeignKey("protein_complexes.complex_id", ondelete="CASCADE"), index=True
    )
    protein_id: Mapped[int] = mapped_column(
        ForeignKey("proteins.protein_id", ondelete="CASCADE"), index=True
    )
    chain_id: Mapped[str] = mapped_column(String(10))
    position: Mapped[int] = mapped_column(Integer, default=0)
    role: Mapped[str] = mapped_column(String(20), default="bait")

    complex: Mapped["ProteinComplex"] = relationship(back_populates="members")
    protein: Mapped["Protein"] = relationship()  # noqa: F821

    def __repr__(self) -> str:
        return f"<ComplexMember complex={self.complex_id} chain={self.chain_id}>"


class ComplexInteraction(TimestampMixin, Base):
    __tablename__ = "complex_interactions"
    __table_args__ = (
        UniqueConstraint(
            "bait_complex_id", "prey_protein_id", "source_path", "alphafold_version",
            name="uq_complex_interactions_store_key",
        ),
    )

    complex_interaction_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bait_complex_id: Mapped[int] = mapped_column(
        ForeignKey("protein_complexes.complex_id", ondelete="CASCADE"), index=True
    )
    prey_protein_id: Mapped[int] = mapped_column(
        ForeignKey("proteins.protein_id", ondelete="CASCADE"), index=True
    )
    iptm: Mapped[float] = mapped_column(Float)
    contacts_pae_lt_3: Mapped[Optional[int]] = mapped_column(Integer)
    contacts_pae_lt_6: Mapped[Optional[int]] = mapped_column(Integer)
    interface_plddt: Mapped[Optional[float]] = mapped_column(Float)
    ipsae: Mapped[Optional[float]] = mapped_column(Float)
    ipsae_confidence: Mapped[Optional[AuxiliaryTier]] = mapped_column(
        value_enum(AuxiliaryTier, length=20)
    )
    ipsae_pae_cutoff: Mapped[Optional[float]] = mapped_column(Float)
    confidence: Mapped[Optional[ConfidenceLevel]] = mapped_column(
        value_enum(ConfidenceLevel), index=True
    )
    reported_band: Mapped[Optional[str]] = mapped_column(String(50))
    alphafold_version: Mapped[ToolGeneration] = mapped_column(value_enum(ToolGeneration, length=10))
    analysis_version: Mapped[SchemaVersion] = mapped_column(value_enum(SchemaVersion, length=10))
    source_path: Mapped[str] = mapped_column(Text)

    per_chain_plddt: Mapped[dict] = mapped_column(JSONPayload, default=dict)
    ranking_score: Mapped[Optional[float]] = mapped_column(Float)
    ptm: Mapped[Optional[float]] = mapped_column(Float)
    mean_plddt: Mapped[Optional[float]] = mapped_column(Float)
    interface_residue_count: Mapped[Optional[int]] = mapped_column(Integer)
    # Mass-spec pulldown support, see services.validation
    experimental_validation: Mapped[Optional[dict]] = mapped_column(JSONPayload)

    complex: Mapped["ProteinComplex"] = relationship(back_populates="interactions")
    prey: Mapped["Protein"] = relationship()  # noqa: F821

    def __repr__(self) -> str:
        return f"<ComplexInteraction complex={self.bait_complex_id} prey={self.prey_protein_id}>"
