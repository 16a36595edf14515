"""
Runtime startup and shutdown.

Hosts (web apps, workers, scripts) call start_runtime() once at startup
and stop_runtime() on the way out:

    runtime = await start_runtime(services=LocalServiceClient())
    try:
        ...
    finally:
        await stop_runtime(runtime)
"""

from typing import Optional

from core.config import Settings, get_settings
from core.ids import IdGenerator, UUIDGenerator
from core.logging import configure_logging, get_logger
from core.storage import create_database
from records.base import RecordModel
from records.definition import ModelRuntime
from tools.service_api import ServiceClient


logger = get_logger(__name__)


async def start_runtime(
    settings: Optional[Settings] = None,
    *,
    services: Optional[ServiceClient] = None,
    id_generator: Optional[IdGenerator] = None,
    bind: bool = True,
) -> ModelRuntime:
    """
    Configure logging, open the configured database and build a runtime.

    Args:
        settings: Application settings (default: cached environment settings)
        services: Service client for delegated hooks
        id_generator: Identifier source (default: UUIDGenerator)
        bind: Bind the runtime to RecordModel so every model uses it
    """
    settings = settings or get_settings()
    configure_logging()

    logger.info(
        "Starting record runtime",
        storage_backend=settings.storage_backend,
        environment=settings.environment,
    )

    database = create_database(settings)
    await database.setup()

    runtime = ModelRuntime(
        database=database,
        id_generator=id_generator or UUIDGenerator(),
        services=services,
    )
    if bind:
        RecordModel.bind(runtime)
    return runtime


async def stop_runtime(runtime: ModelRuntime) -> None:
    """Close the runtime's database and unbind it if it is the global one."""
    logger.info("Stopping record runtime")

    if RecordModel._runtime is runtime:
        RecordModel.unbind()
    await runtime.database.close()

    logger.info("Record runtime stopped")
