from typing import Any, Mapping, Optional, Sequence

from . import settings
from .lifecycle import LifecycleGuard, LifecycleState, ObjectFactory


class PropertiesFactory(ObjectFactory[dict]):
    """Merge property mappings into a single dict

    Args:
        properties: property mappings merged in order, later ones win
        local_properties: properties set directly on this factory
        local_override: apply local properties after (True) or before (False)
            the merged mappings
        singleton: merge once at setup and share the dict, or merge anew on
            every request
    """

    def __init__(
        self,
        properties: Optional[Sequence[Mapping[str, Any]]] = None,
        local_properties: Optional[Mapping[str, Any]] = None,
        local_override: bool = False,
        singleton: Optional[bool] = None,
    ):
        self.properties = list(properties or [])
        self.local_properties = dict(local_properties or {})
        self.local_override = local_override
        self._singleton = (
            settings.MF_DEFAULT_SINGLETON if singleton is None else singleton
        )
        self._guard: LifecycleGuard[dict] = LifecycleGuard(self.__class__.__name__)

    def is_singleton(self) -> bool:
        return self._singleton

    @property
    def state(self) -> LifecycleState:
        return self._guard.state

    def merge_properties(self) -> dict:
        result: dict = {}
        if not self.local_override:
            result.update(self.local_properties)
        for mapping in self.properties:
            result.update(mapping)
        if self.local_override:
            result.update(self.local_properties)
        return result

    def after_properties_set(self):
        self._guard.mark_prepared()
        if self._singleton:
            self._guard.initialize(self.merge_properties)

    def get_object(self) -> dict:
        if self._singleton:
            return self._guard.get()
        return self.merge_properties()

    def declared_result_type(self) -> type:
        return dict
