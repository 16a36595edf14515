"""
Service-invocation tools for delegated lifecycle hooks.

Exports the abstract interface and implementations.
"""

from tools.service_api.base import ServiceClient, ServiceError, ServiceNotFoundError
from tools.service_api.local_client import LocalServiceClient

__all__ = ["ServiceClient", "ServiceError", "ServiceNotFoundError", "LocalServiceClient"]
