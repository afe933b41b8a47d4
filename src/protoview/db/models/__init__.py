from protoview.db.models.base import Base, TimestampMixin
from protoview.db.models.protein import Protein, ProteinAlias
from protoview.db.models.interaction import Interaction
from protoview.db.models.complex import ComplexInteraction, ComplexMember, ProteinComplex

__all__ = [
    "Base",
    "TimestampMixin",
    "Protein",
    "ProteinAlias",
    "Interaction",
    "ProteinComplex",
    "ComplexMember",
    "ComplexInteraction",
]
