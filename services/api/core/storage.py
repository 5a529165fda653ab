# services/api/core/storage.py
"""
Storage backend selection.

Runs once at startup: Google Sheets when fully configured and reachable,
otherwise local JSON files. The fallback is one-way for the life of the
process; nothing retries Sheets later.
"""
from __future__ import annotations

import logging

from adapters.base import StorageAdapter
from adapters.json import JsonAdapter
from adapters.sheets import SheetsAdapter
from settings import Settings

logger = logging.getLogger(__name__)


def _local_adapter(settings: Settings) -> JsonAdapter:
    adapter = JsonAdapter(settings.data_dir)
    adapter.initialize()
    logger.info(f"✓ Local JSON storage ready in '{settings.data_dir}'")
    return adapter


def select_storage_adapter(settings: Settings) -> StorageAdapter:
    """
    Pick and initialize the storage backend.

    Any exception while building or initializing the Sheets adapter is
    logged and answered with the local JSON adapter.
    """
    if not settings.has_sheets_config():
        logger.warning("⚠️  Google Sheets not configured, storing submissions in local JSON files")
        return _local_adapter(settings)

    try:
        logger.info("Initializing Google Sheets adapter...")
        adapter = SheetsAdapter(
            spreadsheet_id=settings.google_spreadsheet_id.strip(),
            client_email=settings.google_service_account_email.strip(),
            private_key=settings.resolved_private_key(),
        )
        adapter.initialize()
        return adapter
    except Exception as e:
        logger.error(f"✗ Failed to initialize Google Sheets: {e}", exc_info=True)
        logger.warning("Falling back to local JSON storage.")
        return _local_adapter(settings)
