from protoview.db.engine import check_connection, get_engine, get_session_factory, get_db
from protoview.db.models import (
    Base,
    ComplexInteraction,
    ComplexMember,
    Interaction,
    Protein,
    ProteinAlias,
    ProteinComplex,
)

__all__ = [
    "check_connection",
    "get_engine",
    "get_session_factory",
    "get_db",
    "Base",
    "Protein",
    "ProteinAlias",
    "Interaction",
    "ProteinComplex",
    "ComplexMember",
    "ComplexInteraction",
]
