"""
Abstract base class for service-invocation clients.

Delegated lifecycle hooks are plain descriptors (for example
{"service": "audit.log", "level": "info"}) routed to a ServiceClient
instead of being called directly. This module defines that contract.

Design principles:
- Descriptor-driven: the descriptor names the service and carries its arguments
- Async-first: All operations are coroutines
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class ServiceClient(ABC):
    """
    Abstract interface for service-invocation facilities.

    Usage:
        client = LocalServiceClient()
        client.register("audit.log", write_audit_entry)

        result = await client.invoke({
            "service": "audit.log",
            "data": {"id": "abc"},
        })
    """

    @abstractmethod
    async def invoke(self, descriptor: Mapping[str, Any]) -> Any:
        """
        Invoke the service a descriptor points at.

        Args:
            descriptor: Service name under "service" plus any arguments

        Returns:
            Whatever the service returns

        Raises:
            ServiceNotFoundError: If no service matches the descriptor
            ServiceError: If the descriptor is malformed
        """
        pass


class ServiceError(Exception):
    """Base exception for service invocation."""
    pass


class ServiceNotFoundError(ServiceError):
    """Descriptor names a service that isn't registered."""
    pass
