"""
In-process service client.

Keeps a registry of named handlers and dispatches descriptors to them.
Handlers may be plain functions or coroutines; both receive the full
descriptor.
"""

import inspect
from typing import Any, Callable, Mapping

from core.logging import get_logger
from tools.service_api.base import ServiceClient, ServiceError, ServiceNotFoundError


logger = get_logger(__name__)

ServiceHandler = Callable[[dict[str, Any]], Any]


class LocalServiceClient(ServiceClient):
    """
    ServiceClient backed by an in-memory registry of handlers.

    Every invocation is appended to `invocations` so tests can assert on
    exactly what a delegated hook sent.
    """

    SERVICE_KEY = "service"

    def __init__(self) -> None:
        self._services: dict[str, ServiceHandler] = {}
        self.invocations: list[dict[str, Any]] = []

    def register(self, name: str, handler: ServiceHandler) -> None:
        """Register a handler under a service name, replacing any previous one."""
        self._services[name] = handler

    def unregister(self, name: str) -> None:
        self._services.pop(name, None)

    @property
    def services(self) -> list[str]:
        return sorted(self._services)

    async def invoke(self, descriptor: Mapping[str, Any]) -> Any:
        name = descriptor.get(self.SERVICE_KEY)
        if not isinstance(name, str) or not name:
            raise ServiceError(
                f"Service descriptor must name a service under {self.SERVICE_KEY!r}"
            )

        handler = self._services.get(name)
        if handler is None:
            raise ServiceNotFoundError(f"Service {name} not found")

        payload = dict(descriptor)
        self.invocations.append(payload)
        logger.debug("Invoking service", service=name)

        result = handler(payload)
        if inspect.isawaitable(result):
            result = await result
        return result
