"""Pairwise bait/prey interaction rows."""

from typing import Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protoview.db.models.base import Base, JSONPayload, TimestampMixin, value_enum
from protoview.models import AuxiliaryTier, ConfidenceLevel, SchemaVersion, ToolGeneration


class Interaction(TimestampMixin, Base):
    __tablename__ = "interactions"
    # Store key: one row per bait/prey pair per independent run
    __table_args__ = (
        UniqueConstraint(
            "bait_protein_id", "prey_protein_id", "source_path",
            name="uq_interactions_store_key",
        ),
    )

    interaction_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bait_protein_id: Mapped[int] = mapped_column(
        ForeignKey("proteins.protein_id", ondelete="CASCADE"), index=True
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
        value_enum(AuxiliaryTier, length=20), index=True
    )
    ipsae_pae_cutoff: Mapped[Optional[float]] = mapped_column(Float)
    confidence: Mapped[Optional[ConfidenceLevel]] = mapped_column(
        value_enum(ConfidenceLevel), index=True
    )
    reported_band: Mapped[Optional[str]] = mapped_column(String(50))
    alphafold_version: Mapped[ToolGeneration] = mapped_column(value_enum(ToolGeneration, length=10))
    analysis_version: Mapped[SchemaVersion] = mapped_column(
        value_enum(SchemaVersion, length=10), index=True
    )
    source_path: Mapped[str] = mapped_column(Text)
    # Mass-spec pulldown support, see services.validation
    experimental_validation: Mapped[Optional[dict]] = mapped_column(JSONPayload)

    bait: Mapped["Protein"] = relationship(foreign_keys=[bait_protein_id])  # noqa: F821
    prey: Mapped["Protein"] = relationship(foreign_keys=[prey_protein_id])  # noqa: F821

    def __repr__(self) -> str:
        return (
            f"<Interaction {self.bait_protein_id}->{self.prey_protein_id} "
            f"iptm={self.iptm} {self.analysis_version}>"
        )
