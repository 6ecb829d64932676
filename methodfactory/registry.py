import logging
from typing import Generic, Iterator, TypeVar

from .exceptions import ConfigurationError, ResolutionError
from .lifecycle import ObjectFactory

logger = logging.getLogger(__name__)

ObjT = TypeVar("ObjT")


class Registry(Generic[ObjT]):
    """Named object factories with a one-shot setup pass

    `initialize` calls the `after_properties_set` hook of every factory once,
    in registration order. No dependency ordering is done: a factory whose
    arguments reference a singleton registered after it fails its setup with
    `NotReadyError`.
    """

    def __init__(
        self,
        mapping: dict[str, ObjectFactory[ObjT]] | None = None,
    ) -> None:
        self._registry: dict[str, ObjectFactory[ObjT]] = {}
        self._initialized: set[str] = set()
        for name, factory in (mapping or {}).items():
            self.register(name, factory)

    @property
    def registry(self) -> dict[str, ObjectFactory[ObjT]]:
        return self._registry

    def register(self, name: str, factory: ObjectFactory[ObjT]) -> None:
        if name in self._registry:
            raise ConfigurationError(f"Factory {name!r} is already registered")
        self._registry[name] = factory

    def initialize(self) -> None:
        for name, factory in self._registry.items():
            if name in self._initialized:
                continue
            hook = getattr(factory, "after_properties_set", None)
            if hook is not None:
                logger.debug("Setting up %s", name)
                hook()
            self._initialized.add(name)

    def get(self, key: str) -> ObjectFactory[ObjT]:
        try:
            return self.registry[key]
        except KeyError as e:
            raise ResolutionError(f"No factory registered as {key!r}") from e

    def get_object(self, key: str) -> ObjT:
        return self.get(key).get_object()

    def __contains__(self, key: object) -> bool:
        return key in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)
