"""
Base class for persisted records.

RecordModel gives every domain model the same data-access layer:

- definition-level operations (classmethods): list, show, wrap,
  create_record, update_record, remove_record
- instance operations: create, update, remove, save, to_json, is_unique

Each lifecycle operation runs through the model's hook chain:

    pre-hook(input) -> gateway call -> post-hook(gateway result)

Usage:
    class User(RecordModel):
        config = ModelConfig(name="User", collection="users", endpoint="/users",
                             schema=UserSchema)

    RecordModel.bind(ModelRuntime(database=db))

    user = await User({"name": "Ada"}).create()
    users = await User.list({"filter": "name=Ada", "wrap": True})
"""

import copy
from typing import Any, ClassVar, Iterator, Mapping, Optional, Union

from core.logging import get_logger
from core.storage import (
    BaseCollectionGateway,
    Filter,
    RemoveAcknowledgment,
)
from records.definition import ModelConfig, ModelRuntime, OperationValidation
from records.diff import INTERNAL_ID_KEY, build_update_operation
from records.errors import ConfigurationError
from records.hooks import HandlerSpec, resolve_hook
from records.options import OperationOptions, resolve_filter, resolve_paging
from records.validation import IdParams, ListQuery, normalize


logger = get_logger(__name__)

Options = Union[OperationOptions, Mapping[str, Any], None]


class RecordModel:
    """
    A record: a field mapping bound to a model class.

    Fields are readable as items (record["name"]) or attributes
    (record.name). Assigning a public attribute writes a field. Names that
    collide with methods are only reachable as items.

    Subclasses must declare `config`; abstract intermediates pass
    abstract=True in the class statement instead.
    """

    config: ClassVar[Optional[ModelConfig]] = None
    _runtime: ClassVar[Optional[ModelRuntime]] = None

    def __init_subclass__(cls, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if abstract:
            return
        if not isinstance(cls.__dict__.get("config"), ModelConfig):
            raise ConfigurationError(
                f"Model {cls.__name__} must declare config = ModelConfig(...) "
                "or be declared with abstract=True"
            )

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **fields: Any):
        if data is not None and not isinstance(data, Mapping):
            raise TypeError(
                f"{type(self).__name__} expects a mapping, got {type(data).__name__}"
            )
        values = {**(data or {}), **fields}
        for key in values:
            if not isinstance(key, str):
                raise TypeError(f"Field names must be strings, got {key!r}")
        object.__setattr__(self, "_data", copy.deepcopy(values))

    # =========================================
    # Field access
    # =========================================

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} record has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._data[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordModel):
            return NotImplemented
        return type(self) is type(other) and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def keys(self):
        return self._data.keys()

    def items(self):
        return self._data.items()

    def to_dict(self) -> dict[str, Any]:
        """Raw copy of the current fields, without validation."""
        return copy.deepcopy(self._data)

    @property
    def record_id(self) -> Any:
        return self._data.get(type(self).id_field())

    # =========================================
    # Model metadata
    # =========================================

    @classmethod
    def _config(cls) -> ModelConfig:
        config = cls.__dict__.get("config")
        if not isinstance(config, ModelConfig):
            raise ConfigurationError(f"Model {cls.__name__} has no configuration")
        return config

    @classmethod
    def model_name(cls) -> str:
        return cls._config().name

    @classmethod
    def collection_name(cls) -> str:
        return cls._config().collection

    @classmethod
    def endpoint_name(cls) -> str:
        return cls._config().endpoint

    @classmethod
    def id_field(cls) -> str:
        return cls._config().id_field

    @classmethod
    def schema(cls):
        return cls._config().schema

    @classmethod
    def handlers(cls) -> Mapping[str, HandlerSpec]:
        return cls._config().handlers

    @classmethod
    def auth(cls) -> str:
        return cls._config().auth

    @classmethod
    def validation(cls) -> dict[str, OperationValidation]:
        """
        Per-operation validation descriptors for transport adapters.

        Payload operations validate the full record against the schema,
        id-addressed operations validate the id parameter, and list
        validates its query parameters.
        """
        schema = cls.schema()
        return {
            "create": OperationValidation(payload=schema),
            "update": OperationValidation(payload=schema),
            "upsert": OperationValidation(payload=schema),
            "remove": OperationValidation(params=IdParams),
            "show": OperationValidation(params=IdParams),
            "list": OperationValidation(query=ListQuery),
        }

    @classmethod
    def validate_spec(cls, operation: str) -> OperationValidation:
        """Validation descriptor for one operation; empty if it has none."""
        return cls.validation().get(operation, OperationValidation())

    # =========================================
    # Runtime binding
    # =========================================

    @classmethod
    def bind(cls, runtime: ModelRuntime) -> None:
        """
        Bind storage and services to this model class.

        Binding on RecordModel itself applies to every model that does not
        bind its own runtime.
        """
        cls._runtime = runtime
        logger.info("Model runtime bound", model=cls.__name__, **runtime.describe())

    @classmethod
    def unbind(cls) -> None:
        if "_runtime" in cls.__dict__:
            delattr(cls, "_runtime")
        if cls is RecordModel:
            cls._runtime = None

    @classmethod
    def runtime(cls) -> ModelRuntime:
        if cls._runtime is None:
            raise ConfigurationError(
                f"Model {cls.__name__} is not bound to a runtime. "
                "Call RecordModel.bind() first."
            )
        return cls._runtime

    @classmethod
    def gateway(cls) -> BaseCollectionGateway:
        return cls.runtime().database.collection(cls.collection_name())

    @classmethod
    def _id_filter(cls, record_id: Any) -> dict[str, Any]:
        return {cls.id_field(): record_id}

    # =========================================
    # Definition-level operations
    # =========================================

    @classmethod
    def wrap(cls, data: Any) -> Any:
        """
        Turn raw data into records of this model.

        A mapping becomes one record, a list or tuple becomes a list of
        records, and anything already a record of this model is returned
        as is. None stays None.
        """
        if data is None or isinstance(data, cls):
            return data
        if isinstance(data, (list, tuple)):
            return [cls.wrap(item) for item in data]
        return cls(data)

    @classmethod
    async def list(cls, options: Options = None) -> Any:
        """
        List records matching the options' filter.

        Returns raw mappings, or records when options.wrap is set, after the
        post-list hook has had its say.
        """
        options = OperationOptions.coerce(options)
        skip, limit = resolve_paging(options)

        logger.debug("Listing records", model=cls.__name__, skip=skip, limit=limit)

        query = await resolve_hook(cls, "pre-list", options)(resolve_filter(options))
        results = await cls.gateway().find(query, skip=skip, limit=limit)
        if options.wrap:
            results = [cls.wrap(r) for r in results]
        return await resolve_hook(cls, "post-list", options)(results)

    @classmethod
    async def show(cls, record_id: Any, options: Options = None) -> Any:
        """
        Fetch one record by id, or by an explicit query mapping.

        Returns None when nothing matches.
        """
        options = OperationOptions.coerce(options)
        logger.debug("Showing record", model=cls.__name__, record_id=record_id)

        if isinstance(record_id, Mapping):
            query: Filter = dict(record_id)
        else:
            query = cls._id_filter(record_id)

        query = await resolve_hook(cls, "pre-show", options)(query)
        data = await cls.gateway().find_one(query)
        if options.wrap and data is not None:
            data = cls.wrap(data)
        return await resolve_hook(cls, "post-show", options)(data)

    @classmethod
    async def create_record(cls, data: Mapping[str, Any], options: Options = None) -> Any:
        """Wrap raw data and create it."""
        return await cls.wrap(data).create(options)

    @classmethod
    async def update_record(
        cls,
        record_id: Any,
        data: Mapping[str, Any],
        options: Options = None,
    ) -> Any:
        """Update the record with the given id from a full payload."""
        return await cls.wrap({**data, cls.id_field(): record_id}).update(options)

    @classmethod
    async def remove_record(cls, record_id: Any, options: Options = None) -> Any:
        """
        Remove a record by id.

        The pre-remove hook receives the id filter and must return a truthy
        value for the delete to run. A falsy value skips the delete without
        raising; the post-remove hook then receives None instead of an
        acknowledgment.
        """
        options = OperationOptions.coerce(options)
        logger.debug("Removing record", model=cls.__name__, record_id=record_id)
        query = cls._id_filter(record_id)
        ack = await cls._vetoed_remove(query, options, instance=None)
        return await resolve_hook(cls, "post-remove", options)(ack)

    @classmethod
    async def _vetoed_remove(
        cls,
        query: dict[str, Any],
        options: OperationOptions,
        instance: Optional["RecordModel"],
    ) -> Optional[RemoveAcknowledgment]:
        check = await resolve_hook(cls, "pre-remove", options, instance)(query)
        if not check:
            logger.debug("Remove vetoed by pre-remove hook", model=cls.__name__, query=query)
            return None
        return await cls.gateway().remove_one(query)

    # =========================================
    # Instance operations
    # =========================================

    async def create(self, options: Options = None) -> Any:
        """
        Persist this record as a new one.

        Always upserts, so a record without an id gets a fresh one and is
        inserted without a pre-existence check.
        """
        options = OperationOptions.coerce(options)
        cls = type(self)
        await resolve_hook(cls, "pre-create", options, self)(self)
        saved = await self.save(None, upsert=True)
        return await resolve_hook(cls, "post-create", options, self)(saved)

    async def update(self, options: Options = None) -> Any:
        """
        Apply changes to an existing record.

        The pre-update hook receives this record and returns the patch to
        save; without a hook the whole record is saved. Never upserts, so
        updating an id that does not exist changes nothing.
        """
        options = OperationOptions.coerce(options)
        cls = type(self)
        patch = await resolve_hook(cls, "pre-update", options, self)(self)
        saved = await self.save(patch, upsert=False)
        return await resolve_hook(cls, "post-update", options, self)(saved)

    async def remove(self, options: Options = None) -> Any:
        """
        Delete the stored record with this record's id.

        Same veto contract as remove_record. The in-memory record is left
        as it was.
        """
        options = OperationOptions.coerce(options)
        cls = type(self)
        logger.debug("Removing record", model=cls.__name__, record_id=self.record_id)
        ack = await cls._vetoed_remove(cls._id_filter(self.record_id), options, self)
        return await resolve_hook(cls, "post-remove", options, self)(ack)

    async def save(
        self,
        data: Union[Mapping[str, Any], "RecordModel", None] = None,
        *,
        upsert: bool = False,
    ) -> "RecordModel":
        """
        Write a patch (or the whole record) to storage.

        Args:
            data: Patch to apply. None means the whole current record; a
                record means that record's fields. In a patch, None clears
                a field and omitted fields are left alone.
            upsert: Insert the record if no stored record has its id

        Returns:
            This record, with the confirmed changes merged in

        Raises:
            ValidationError: If the resulting record would not match the
                schema. Nothing is written in that case.
        """
        cls = type(self)
        id_field = cls.id_field()

        if data is None:
            patch = self.to_json()
        elif isinstance(data, RecordModel):
            patch = data.to_json()
        else:
            patch = dict(data)

        normalized = normalize(cls.schema(), self._candidate(patch), model=cls.model_name())
        validated_patch = {
            key: None if value is None else normalized[key]
            for key, value in patch.items()
            if key not in (id_field, INTERNAL_ID_KEY)
            and (value is None or key in normalized)
        }
        operation = build_update_operation(validated_patch, id_field)

        if not self.record_id:
            self._data[id_field] = cls.runtime().id_generator.new_id()
        query = cls._id_filter(self.record_id)

        logger.debug(
            "Saving record",
            model=cls.__name__,
            collection=cls.collection_name(),
            record_id=self.record_id,
            upsert=upsert,
        )

        if operation.is_empty:
            if not upsert:
                logger.debug("Nothing to save", model=cls.__name__, record_id=self.record_id)
                return self
            operation.set_on_insert = {id_field: self.record_id}

        await cls.gateway().update_one(query, operation, upsert=upsert)

        for key, value in (operation.set or {}).items():
            self._data[key] = copy.deepcopy(value)
        for key in operation.unset or {}:
            self._data.pop(key, None)
        return self

    def _candidate(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """The record as it would be after the patch, for validation."""
        merged = {**self._data, **patch}
        return {
            key: value
            for key, value in merged.items()
            if value is not None and key != INTERNAL_ID_KEY
        }

    def to_json(self) -> dict[str, Any]:
        """
        Validated, normalized copy of the record's fields.

        Raises:
            ValidationError: If the record does not match the schema
        """
        cls = type(self)
        data = {k: v for k, v in self._data.items() if k != INTERNAL_ID_KEY}
        return normalize(cls.schema(), data, model=cls.model_name())

    async def is_unique(self) -> bool:
        """True when no stored record has this record's id."""
        cls = type(self)
        existing = await cls.gateway().find_one(cls._id_filter(self.record_id))
        return existing is None
