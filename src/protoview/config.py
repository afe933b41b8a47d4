"""Application configuration -- store, ingestion and UniProt settings."""

import os

from pydantic import BaseModel


class DatabaseConfig(BaseModel):
    url: str = ""  # Required; set DATABASE_URL
    echo: bool = False


class IngestConfig(BaseModel):
    base_paths: list[str] = []
    basenames: list[str] = [
        "ALL_RESULTS_FINAL_ANNOTATED.txt",
        "high_confidence_af2_predictions_v2_summary_ALL.txt",
        "AF3_PD_analysis_v3.json",
        "AF3_PD_analysis_v4.json",
        "AF3_bait_prey_analysis_v3.json",
        "AF3_bait_prey_analysis_v4.json",
    ]
    delete_batch_size: int = 100
    default_variant: str = "FL"


class UniProtConfig(BaseModel):
    base_url: str = "https://rest.uniprot.org"
    batch_size: int = 50
    batch_delay: float = 0.1  # seconds between batches
    user_agent: str = "ProtoView/1.0"


class AppConfig(BaseModel):
    database: DatabaseConfig = DatabaseConfig()
    ingest: IngestConfig = IngestConfig()
    uniprot: UniProtConfig = UniProtConfig()
    debug: bool = False


def _split_paths(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _build_config() -> AppConfig:
    """Build config from environment variables."""
    return AppConfig(
        database=DatabaseConfig(
            url=os.environ.get("DATABASE_URL", "") or os.environ.get("POSTGRES_URL", ""),
            echo=os.environ.get("DB_ECHO", "").lower() in ("1", "true", "yes"),
        ),
        ingest=IngestConfig(
            base_paths=_split_paths(os.environ.get("PROTOVIEW_BASE_PATHS", "")),
            delete_batch_size=int(os.environ.get("PROTOVIEW_DELETE_BATCH_SIZE", "100")),
        ),
        uniprot=UniProtConfig(
            batch_size=int(os.environ.get("UNIPROT_BATCH_SIZE", "50")),
            batch_delay=float(os.environ.get("UNIPROT_BATCH_DELAY", "0.1")),
        ),
        debug=os.environ.get("DEBUG", "").lower() in ("1", "true", "yes"),
    )


config = _build_config()
