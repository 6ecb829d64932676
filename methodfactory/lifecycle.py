import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import InitializationError, NotReadyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LifecycleState(str, Enum):
    UNPREPARED = "unprepared"
    PREPARED = "prepared"
    READY = "ready"
    FAILED = "failed"


class ObjectFactory(ABC, Generic[T]):
    """Something that hands out an object on request"""

    @abstractmethod
    def get_object(self) -> T:
        ...


class LifecycleGuard(Generic[T]):
    """Cache the single result of a singleton producer

    Transitions: UNPREPARED -> PREPARED -> READY, or PREPARED -> FAILED when
    the producer raises. READY and FAILED are terminal. The first invocation
    is serialized by a lock so concurrent setups run the producer once; reads
    after READY take no lock.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._state = LifecycleState.UNPREPARED
        self._value: Optional[T] = None
        self._failure: Optional[BaseException] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def failure(self) -> Optional[BaseException]:
        return self._failure

    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY

    def mark_prepared(self):
        if self._state is LifecycleState.UNPREPARED:
            self._state = LifecycleState.PREPARED

    def initialize(self, producer: Callable[[], T]) -> None:
        """Run `producer` and cache its result, unless that already happened

        Raises:
            InitializationError: a previous initialization failed
            Exception: whatever `producer` raises, unchanged
        """
        with self._lock:
            if self._state is LifecycleState.READY:
                return
            if self._state is LifecycleState.FAILED:
                raise InitializationError(
                    f"Initialization of {self.name} failed earlier and is not retried"
                ) from self._failure

            self.mark_prepared()
            try:
                value = producer()
            except BaseException as e:
                self._failure = e
                self._state = LifecycleState.FAILED
                logger.error("Initialization of %s failed: %r", self.name, e)
                raise

            self._value = value
            self._state = LifecycleState.READY
            logger.info("Initialized %s", self.name)

    def get(self) -> T:
        """Return the cached result

        Raises:
            NotReadyError: the producer has not completed successfully
        """
        if self._state is not LifecycleState.READY:
            logger.warning("%s was requested while %s", self.name, self._state.value)
            raise NotReadyError(
                f"{self.name} is not fully initialized yet ({self._state.value})"
            ) from self._failure
        return self._value  # type: ignore[return-value]

    def __repr__(self):
        return f"LifecycleGuard(name={self.name!r}, state={self._state.value})"
