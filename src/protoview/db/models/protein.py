from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from protoview.db.models.base import Base, TimestampMixin


class Protein(TimestampMixin, Base):
    __tablename__ = "proteins"

    protein_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    accession: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    organism: Mapped[Optional[str]] = mapped_column(String(200))
    organism_code: Mapped[Optional[str]] = mapped_column(String(10))
    # AF2_* pseudo-accessions synthesized from directory names
    is_synthetic: Mapped[bool] = mapped_column(Boolean, default=False)

    aliases: Mapped[list["ProteinAlias"]] = relationship(
        back_populates="protein", cascade="all, delete-orphan"
    )

    @property
    def label(self) -> str:
        return self.display_name or self.accession

    def __repr__(self) -> str:
        return f"<Protein {self.accession} ({self.display_name or 'unknown'})>"


class ProteinAlias(Base):
    __tablename__ = "protein_aliases"
    __table_args__ = (UniqueConstraint("protein_id", "alias_name"),)

    alias_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    protein_id: Mapped[int] = mapped_column(
        ForeignKey("proteins.protein_id", ondelete="CASCADE"), index=True
    )
    alias_name: Mapped[str] = mapped_column(String(255), index=True)
    alias_type: Mapped[Optional[str]] = mapped_column(String(50))
    source: Mapped[str] = mapped_column(String(50), default="uniprot")

    protein: Mapped["Protein"] = relationship(back_populates="aliases")

    def __repr__(self) -> str:
        return f"<ProteinAlias {self.alias_name} ({self.alias_type})>"
