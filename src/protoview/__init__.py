"""ProtoView: structural-prediction interaction reconciliation."""

__version__ = "0.1.0"
