"""
Lifecycle hooks.

Every record operation runs a pre-<op> hook before touching storage and a
post-<op> hook on the storage result:

    pre-hook(input) -> persistence call -> post-hook(result)

A model's handler map binds lifecycle keys to a HandlerSpec, which is one of

- Inline(fn): fn(HookContext) is called directly; its return value (awaited
  if needed) replaces the pipeline value.
- Delegated(descriptor): the descriptor, merged with the hook context
  fields, is sent to the runtime's ServiceClient; the service result
  replaces the pipeline value.

A key with no handler passes the pipeline value through unchanged.
"""

import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Union

from records.errors import ConfigurationError
from records.options import OperationOptions

if TYPE_CHECKING:
    from records.base import RecordModel
    from tools.service_api import ServiceClient


OPERATIONS = ("list", "show", "create", "update", "remove")

HOOK_KEYS = frozenset(
    f"{stage}-{operation}" for operation in OPERATIONS for stage in ("pre", "post")
)


@dataclass
class HookContext:
    """
    Everything a hook sees.

    Attributes:
        model: The record instance, for instance-bound operations only
        model_class: The model class the operation runs on
        data: Current pipeline value
        params: Request parameters from the options bag
        credentials: Caller credentials from the options bag
    """
    model_class: type["RecordModel"]
    data: Any
    model: Optional["RecordModel"] = None
    params: dict[str, Any] = field(default_factory=dict)
    credentials: Optional[Any] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "model_class": self.model_class,
            "data": self.data,
            "params": self.params,
            "credentials": self.credentials,
        }


@dataclass(frozen=True)
class Inline:
    """A hook implemented as a callable taking a HookContext."""
    fn: Callable[[HookContext], Any]

    async def invoke(self, context: HookContext, services: Optional["ServiceClient"]) -> Any:
        result = self.fn(context)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(frozen=True)
class Delegated:
    """A hook implemented by an external service named in a descriptor."""
    descriptor: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "descriptor", MappingProxyType(dict(self.descriptor)))

    async def invoke(self, context: HookContext, services: Optional["ServiceClient"]) -> Any:
        if services is None:
            raise ConfigurationError(
                f"Delegated hook on model {context.model_class.__name__} "
                "requires a service client in the model runtime"
            )
        return await services.invoke({**self.descriptor, **context.as_dict()})


HandlerSpec = Union[Inline, Delegated]

HookTransform = Callable[[Any], Awaitable[Any]]


def as_handler_spec(key: str, handler: Any) -> HandlerSpec:
    """Normalize a handler map entry: callables become Inline, mappings Delegated."""
    if isinstance(handler, (Inline, Delegated)):
        return handler
    if callable(handler):
        return Inline(handler)
    if isinstance(handler, Mapping):
        return Delegated(handler)
    raise ConfigurationError(
        f"Handler for {key!r} must be callable or a service descriptor, "
        f"got {type(handler).__name__}"
    )


def normalize_handlers(handlers: Mapping[str, Any]) -> Mapping[str, HandlerSpec]:
    """
    Validate a handler map and freeze it.

    Raises:
        ConfigurationError: On unknown lifecycle keys or unusable handlers
    """
    unknown = set(handlers) - HOOK_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown lifecycle hook keys: {sorted(unknown)}. "
            f"Valid keys: {sorted(HOOK_KEYS)}"
        )
    return MappingProxyType(
        {key: as_handler_spec(key, handler) for key, handler in handlers.items()}
    )


def resolve_hook(
    model_class: type["RecordModel"],
    key: str,
    options: OperationOptions,
    instance: Optional["RecordModel"] = None,
) -> HookTransform:
    """
    Build the transform for one lifecycle key.

    The handler is looked up when the transform runs, not when it is built.
    Exceptions raised by the handler propagate to the caller.
    """

    async def transform(value: Any) -> Any:
        spec = model_class.handlers().get(key)
        if spec is None:
            return value

        context = HookContext(
            model_class=model_class,
            data=value,
            model=instance,
            params=options.params,
            credentials=options.credentials,
        )
        return await spec.invoke(context, model_class.runtime().services)

    return transform
