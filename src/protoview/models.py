"""Core vocabulary shared by parsers, classifier and store models."""

from __future__ import annotations

from enum import Enum


# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------

class ToolGeneration(str, Enum):
    LEGACY = "AF2"
    CURRENT = "AF3"


class SchemaVersion(str, Enum):
    PULLDOWN = "pulldown"  # AF2 pulldown summary text
    TEXT = "text"          # annotated AF3 results report
    V3 = "v3"
    V4 = "v4"

    @property
    def rank(self) -> int:
        return _SCHEMA_RANK[self]

    @classmethod
    def latest(cls, a: "SchemaVersion | str | None", b: "SchemaVersion | str | None") -> "SchemaVersion | None":
        """Return whichever of two versions ranks higher (monotonic advance)."""
        va = cls(a) if a else None
        vb = cls(b) if b else None
        if va is None:
            return vb
        if vb is None:
            return va
        return va if va.rank >= vb.rank else vb


_SCHEMA_RANK = {
    SchemaVersion.PULLDOWN: 0,
    SchemaVersion.TEXT: 1,
    SchemaVersion.V3: 2,
    SchemaVersion.V4: 3,
}


# ---------------------------------------------------------------------------
# Confidence vocabularies
# ---------------------------------------------------------------------------

class ConfidenceLevel(str, Enum):
    # Interface-quality scheme
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    # Annotated-report banners (passed through for text records)
    VERY_HIGH_CONFIDENCE = "Very High Confidence"
    WORTH_INVESTIGATING = "Worth Investigating"
    LOW_IPTM = "Low iPTM - Proceed with Caution"
    # Lowest producer band; never store-eligible
    VERY_LOW = "Very Low"
    UNKNOWN = "Unknown"


# Banner line prefix -> band
REPORT_BANNERS: dict[str, ConfidenceLevel] = {
    "VERY HIGH CONFIDENCE": ConfidenceLevel.VERY_HIGH_CONFIDENCE,
    "WORTH INVESTIGATING": ConfidenceLevel.WORTH_INVESTIGATING,
    "LOW iPTM - PROCEED WITH CAUTION": ConfidenceLevel.LOW_IPTM,
}

# The three actionable bands shared by reports and v3/v4 JSON confidence_class
ACTIONABLE_BANDS = frozenset({
    ConfidenceLevel.VERY_HIGH_CONFIDENCE.value,
    ConfidenceLevel.WORTH_INVESTIGATING.value,
    ConfidenceLevel.LOW_IPTM.value,
})

# AF2 pulldown summary bands
PULLDOWN_BANDS = frozenset({"Very High", "High", "Medium", "Low"})


class AuxiliaryTier(str, Enum):
    """ipSAE-based four-tier classification (schema v4)."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"
