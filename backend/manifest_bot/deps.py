"""FastAPI dependencies (pipeline and sheet sink singletons)."""
from __future__ import annotations

from functools import lru_cache

from .config import get_settings
from .services.orchestration.manifest_pipeline import ManifestPipeline
from .services.sheets import SheetsService


@lru_cache(maxsize=1)
def get_pipeline() -> ManifestPipeline:
    """Build the extraction pipeline once from environment settings.

    The pipeline holds only immutable configuration, so sharing it between
    concurrent requests is safe.
    """
    return ManifestPipeline(get_settings().pipeline_config())


@lru_cache(maxsize=1)
def get_sheets() -> SheetsService:
    return SheetsService(get_settings().sheet_config())
