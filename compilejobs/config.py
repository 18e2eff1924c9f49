# compilejobs/config.py

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

# --- Base paths ---
# Project root can be overridden if needed (e.g. for tests or deployment)
BASE_DIR = os.path.abspath(os.getenv("COMPILE_JOBS_BASE_DIR", os.path.join(os.path.dirname(__file__), "..")))


# ---------------------------
# Structured configuration
# ---------------------------

@dataclass(frozen=True)
class StoreConfig:
    """Filesystem layout of the job store.

    Values can be overridden via environment variables:
    - COMPILE_JOBS_PERSISTENCE_DIR
    - COMPILE_JOBS_ROOT (takes precedence over the derived jobs root)
    """

    persistence_dir: str = field(
        default_factory=lambda: os.getenv(
            "COMPILE_JOBS_PERSISTENCE_DIR", os.path.join(BASE_DIR, "out")
        )
    )
    jobs_root_override: str | None = field(
        default_factory=lambda: os.getenv("COMPILE_JOBS_ROOT") or None
    )

    def connector_dir(self) -> str:
        return os.path.join(self.persistence_dir, "connector-data")

    def jobs_root(self) -> str:
        if self.jobs_root_override:
            return self.jobs_root_override
        return os.path.join(self.connector_dir(), "compilation-jobs")


STORE = StoreConfig()


def get_jobs_root(config: StoreConfig | None = None) -> Path:
    """Return the directory holding one subdirectory per job."""
    return Path((config or STORE).jobs_root())


# --- Logging ---
LOG_LEVEL = os.getenv("COMPILE_JOBS_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for entrypoints (CLI, API).

    Library modules never call this; they only create module loggers.
    """
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
