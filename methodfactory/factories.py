import logging
from typing import Any, Optional

from . import settings
from .exceptions import ConfigurationError
from .invoker import MethodInvoker
from .lifecycle import LifecycleGuard, LifecycleState, ObjectFactory
from .resolver import ResolvedMethod

logger = logging.getLogger(__name__)


class MethodInvokingBean(MethodInvoker):
    """Invoke a method once during setup and discard whatever it returns

    Useful for side effects only, e.g. calling a static method that registers
    something or forces an initialization. A failed run is final: the
    original exception propagates from the first call, and every later call
    raises `InitializationError`.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._guard: LifecycleGuard[None] = LifecycleGuard(repr(self))

    @property
    def state(self) -> LifecycleState:
        return self._guard.state

    def prepare(self) -> ResolvedMethod:
        resolved = super().prepare()
        self._guard.name = repr(self)
        self._guard.mark_prepared()
        return resolved

    def run_once(self):
        self.prepare()
        self._guard.initialize(self._run)

    def after_properties_set(self):
        self.run_once()

    def _run(self) -> None:
        self.invoke_with_target_exception()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.target_method!r})"


class MethodInvokingFactory(MethodInvoker, ObjectFactory[Any]):
    """Produce objects by invoking a static or instance method

    In singleton mode (the default, see `MF_DEFAULT_SINGLETON`) the method is
    invoked once by `on_setup_complete` and every `produce` returns that
    result. In prototype mode every `produce` invokes the method again.

    Example:
        factory = MethodInvokingFactory(
            static_method="mypackage.utils.MathUtils.square", arguments=[5]
        )
        factory.on_setup_complete()
        factory.produce()  # 25, computed once
    """

    def __init__(self, singleton: Optional[bool] = None, **kwargs):
        super().__init__(**kwargs)
        self._singleton = (
            settings.MF_DEFAULT_SINGLETON if singleton is None else singleton
        )
        self._guard: LifecycleGuard[Any] = LifecycleGuard(repr(self))

    def configure(self, singleton: bool):
        """Choose singleton or prototype mode, only before preparation"""
        if self.is_prepared():
            raise ConfigurationError(
                "Cannot change the caching mode of an already prepared factory"
            )
        self._singleton = singleton

    def is_singleton(self) -> bool:
        return self._singleton

    @property
    def state(self) -> LifecycleState:
        return self._guard.state

    def prepare(self) -> ResolvedMethod:
        resolved = super().prepare()
        self._guard.name = repr(self)
        self._guard.mark_prepared()
        return resolved

    def on_setup_complete(self):
        """Prepare, and in singleton mode invoke and cache the result"""
        self.prepare()
        if self._singleton:
            self._guard.initialize(self.invoke_with_target_exception)

    def after_properties_set(self):
        self.on_setup_complete()

    def produce(self) -> Any:
        """Return the cached object, or a fresh one in prototype mode

        Raises:
            NotReadyError: singleton mode before a successful setup
        """
        if self._singleton:
            return self._guard.get()
        return self.invoke_with_target_exception()

    def get_object(self) -> Any:
        return self.produce()

    def declared_result_type(self) -> Any:
        """Declared return type of the method, None until prepared"""
        resolved = self.prepared_method
        if resolved is None:
            return None
        return resolved.return_type

    @property
    def object_type(self) -> Any:
        return self.declared_result_type()

    def __repr__(self):
        mode = "singleton" if self._singleton else "prototype"
        return f"{self.__class__.__name__}({self.target_method!r}, {mode})"
