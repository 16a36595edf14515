"""
Tests for the lifecycle hook chain.
"""

import pytest

from records import ConfigurationError, Delegated, HookContext, Inline, OperationOptions
from records.hooks import resolve_hook


@pytest.mark.asyncio
async def test_missing_hook_passes_value_through(Widget):
    """Test that a missing hook passes the value through."""
    transform = resolve_hook(Widget, "pre-list", OperationOptions())

    assert await transform({"a": 1}) == {"a": 1}


@pytest.mark.asyncio
async def test_inline_hook_replaces_value_and_sees_context(make_model):
    """Test that an inline hook sees the context and replaces the value."""
    seen: list[HookContext] = []

    def pre_show(context: HookContext):
        seen.append(context)
        return {**context.data, "tenant": context.credentials["tenant"]}

    Widget = make_model(handlers={"pre-show": pre_show})
    options = OperationOptions(params={"id": "w1"}, credentials={"tenant": "t1"})

    result = await resolve_hook(Widget, "pre-show", options)({"id": "w1"})

    assert result == {"id": "w1", "tenant": "t1"}
    assert seen[0].model is None
    assert seen[0].model_class is Widget
    assert seen[0].params == {"id": "w1"}


@pytest.mark.asyncio
async def test_async_inline_hook_is_awaited(make_model):
    """Test that an async inline hook is awaited."""
    async def post_list(context):
        return len(context.data)

    Widget = make_model(handlers={"post-list": Inline(post_list)})

    assert await resolve_hook(Widget, "post-list", OperationOptions())([1, 2, 3]) == 3


@pytest.mark.asyncio
async def test_instance_bound_hook_gets_model(make_model):
    """Test that an instance-bound hook gets the model."""
    seen = []
    Widget = make_model(handlers={"pre-create": lambda ctx: seen.append(ctx.model)})
    widget = Widget(name="w")

    await resolve_hook(Widget, "pre-create", OperationOptions(), widget)(widget)

    assert seen == [widget]


@pytest.mark.asyncio
async def test_delegated_hook_routes_to_service(make_model, services):
    """Test routing a delegated hook to its service."""
    services.register("audit", lambda descriptor: {"audited": descriptor["data"]})
    descriptor = {"service": "audit", "level": "info"}
    Widget = make_model(handlers={"post-remove": descriptor})

    options = OperationOptions(params={"id": "w1"}, credentials={"user": "u1"})
    result = await resolve_hook(Widget, "post-remove", options)("ack")

    assert result == {"audited": "ack"}
    sent = services.invocations[0]
    assert sent["level"] == "info"
    assert sent["model_class"] is Widget
    assert sent["model"] is None
    assert sent["credentials"] == {"user": "u1"}
    assert sent["params"] == {"id": "w1"}
    # The declared descriptor is never mutated
    assert descriptor == {"service": "audit", "level": "info"}
    assert dict(Widget.handlers()["post-remove"].descriptor) == descriptor


@pytest.mark.asyncio
async def test_async_service_handler(make_model, services):
    """Test a delegated hook with an async service handler."""
    async def enrich(descriptor):
        return {**descriptor["data"], "enriched": True}

    services.register("enrich", enrich)
    Widget = make_model(handlers={"pre-list": Delegated({"service": "enrich"})})

    assert await resolve_hook(Widget, "pre-list", OperationOptions())({"a": 1}) == {
        "a": 1,
        "enriched": True,
    }


@pytest.mark.asyncio
async def test_delegated_hook_without_service_client(make_model, runtime):
    """Test a delegated hook without a service client."""
    runtime.services = None
    Widget = make_model(handlers={"pre-list": {"service": "anything"}})

    with pytest.raises(ConfigurationError, match="service client"):
        await resolve_hook(Widget, "pre-list", OperationOptions())({})


@pytest.mark.asyncio
async def test_hook_errors_propagate(make_model):
    """Test that hook errors propagate."""
    def explode(context):
        raise PermissionError("denied")

    Widget = make_model(handlers={"pre-list": explode})

    with pytest.raises(PermissionError, match="denied"):
        await resolve_hook(Widget, "pre-list", OperationOptions())({})


def test_handlers_are_normalized_to_specs(make_model):
    """Test that handlers are normalized to Inline and Delegated."""
    def fn(context):
        return None

    Widget = make_model(handlers={"pre-list": fn, "post-list": {"service": "s"}})

    assert Widget.handlers()["pre-list"] == Inline(fn)
    assert isinstance(Widget.handlers()["post-list"], Delegated)


def test_unknown_hook_key_is_rejected(make_model):
    """Test that an unknown hook key is rejected."""
    with pytest.raises(ConfigurationError, match="pre-destroy"):
        make_model(handlers={"pre-destroy": lambda ctx: None})


def test_unusable_handler_is_rejected(make_model):
    """Test that an unusable handler is rejected."""
    with pytest.raises(ConfigurationError):
        make_model(handlers={"pre-list": 42})
