"""
Store Factory.

Builds the remote store client selected in config/settings/store.yaml.
"""

from notekeeper.core.config import Settings, get_app_config, get_settings
from notekeeper.core.config_schema import StoreSchema
from notekeeper.core.logging import get_logger
from notekeeper.core.resilience import create_circuit_breaker
from notekeeper.store.base import NoteStore
from notekeeper.store.memory import InMemoryNoteStore
from notekeeper.store.postgrest import PostgrestNoteStore

logger = get_logger(__name__)


def create_store(
    config: StoreSchema | None = None,
    settings: Settings | None = None,
) -> NoteStore:
    """
    Create the configured note store.

    Args:
        config: Store settings. If None, reads store.yaml.
        settings: Secrets. If None, reads config/.env.

    Returns:
        A NoteStore implementation
    """
    config = config or get_app_config().store

    if config.backend == "memory":
        logger.info("Using in-memory note store")
        return InMemoryNoteStore()

    settings = settings or get_settings()
    logger.info(
        "Using PostgREST note store",
        extra={"base_url": config.base_url, "table": config.table},
    )
    return PostgrestNoteStore(
        base_url=config.base_url,
        api_key=settings.store_api_key,
        table=config.table,
        timeout=config.request_timeout_seconds,
        max_concurrent_requests=config.max_concurrent_requests,
        breaker=create_circuit_breaker(
            "note_store",
            fail_max=config.circuit_breaker.fail_max,
            timeout_duration=config.circuit_breaker.timeout_duration,
        ),
    )
