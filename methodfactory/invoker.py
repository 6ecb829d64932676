import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from . import settings
from .conversion import TypeConverter
from .exceptions import ConfigurationError, InvocationError, MethodFactoryError
from .lifecycle import ObjectFactory
from .lookup import MethodLookup
from .resolver import ArgumentResolver, ResolvedMethod

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    RETURNED = "returned"
    RESOLUTION_FAILURE = "resolution_failure"
    DISPATCH_FAILURE = "dispatch_failure"
    DOMAIN_FAILURE = "domain_failure"


@dataclass
class InvocationOutcome:
    """Result of one invocation attempt

    Args:
        kind: how the attempt ended
        value: the return value, for RETURNED
        error: the failure; for DOMAIN_FAILURE it is the exact exception the
            target method raised
    """

    kind: OutcomeKind
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.RETURNED

    def unwrap(self) -> Any:
        """Return the value, or raise the captured exception itself"""
        if self.error is not None:
            raise self.error
        return self.value


class _Setting:
    """Invoker attribute that can only be changed before preparation"""

    def __set_name__(self, owner, name):
        self.name = name
        self.attr = f"_{name}"

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return getattr(obj, self.attr, None)

    def __set__(self, obj, value):
        if obj.is_prepared():
            raise ConfigurationError(
                f"Cannot change '{self.name}' of an already prepared invoker"
            )
        setattr(obj, self.attr, value)


class MethodInvoker:
    """Invoke a static or instance method by name

    Either set `target_class` (a class, a module or a dotted import path) and
    `target_method` for a static call, or `target_object` and `target_method`
    for an instance call. Arguments are converted to the parameter types of
    the resolved method on every invocation. An argument that is an
    `ObjectFactory` is replaced by the object it produces.

    Args:
        target_class: class or module declaring a static method
        target_object: object whose method is invoked
        target_method: name of the method
        static_method: shorthand for target class plus method, e.g.
            "package.module.Class.method"
        arguments: positional raw arguments
        keyword_arguments: keyword raw arguments
        converter: type converter, pydantic based by default
        lookup: class and method lookup
        allow_private: allow method names starting with an underscore
    """

    target_class = _Setting()
    target_object = _Setting()
    target_method = _Setting()
    arguments = _Setting()
    keyword_arguments = _Setting()

    def __init__(
        self,
        target_class: Any = None,
        target_object: Any = None,
        target_method: Optional[str] = None,
        static_method: Optional[str] = None,
        arguments: Optional[Sequence[Any]] = None,
        keyword_arguments: Optional[Mapping[str, Any]] = None,
        converter: Optional[TypeConverter] = None,
        lookup: Optional[MethodLookup] = None,
        allow_private: Optional[bool] = None,
    ):
        self._resolver = ArgumentResolver(converter, lookup)
        # arguments dereferenced while preparing, reused by the first invocation
        self._prepared_arguments: Optional[tuple[tuple, dict]] = None
        if allow_private is None:
            allow_private = settings.MF_ALLOW_PRIVATE_METHODS
        self.allow_private = allow_private
        self.target_class = target_class
        self.target_object = target_object
        self.target_method = target_method
        self.arguments = arguments
        self.keyword_arguments = keyword_arguments
        if static_method is not None:
            self.set_static_method(static_method)

    def set_static_method(self, static_method: str):
        """Set target class and method from a fully qualified method path"""
        class_name, _, method = static_method.rpartition(".")
        if not class_name or not method:
            raise ConfigurationError(
                "Static method must be a fully qualified name like "
                f"'package.module.Class.method', got {static_method!r}"
            )
        self.target_class = class_name
        self.target_method = method

    def is_prepared(self) -> bool:
        return self._resolver.is_prepared()

    @property
    def prepared_method(self) -> Optional[ResolvedMethod]:
        return self._resolver.resolved

    def prepare(self) -> ResolvedMethod:
        """Resolve the target method; later calls reuse the first resolution"""
        if self._resolver.is_prepared():
            return self._resolver.resolved  # type: ignore[return-value]

        args, kwargs = self._raw_arguments()
        resolved = self._resolver.prepare(
            target_class=self.target_class,
            target_object=self.target_object,
            method=self.target_method,
            args=args,
            kwargs=kwargs,
        )
        self._prepared_arguments = (args, kwargs)
        return resolved

    def invoke(self) -> InvocationOutcome:
        """Invoke the target method, preparing it first if needed

        Failures of this invocation are reported through the outcome. A
        failure raised by a factory passed as an argument is reported as
        DOMAIN_FAILURE carrying that error. Only non-`Exception` errors (e.g.
        `KeyboardInterrupt`) propagate directly.
        """
        try:
            resolved = self.prepare()
            args, kwargs = self._call_arguments()
            call_args, call_kwargs = self._resolver.convert(resolved, args, kwargs)
        except InvocationError as e:
            return InvocationOutcome(OutcomeKind.DISPATCH_FAILURE, error=e)
        except MethodFactoryError as e:
            return InvocationOutcome(OutcomeKind.RESOLUTION_FAILURE, error=e)
        except Exception as e:
            # raised by a factory referenced as an argument
            logger.debug("Producing the arguments of %s failed: %r", self, e)
            return InvocationOutcome(OutcomeKind.DOMAIN_FAILURE, error=e)

        if not self._is_accessible(resolved.name):
            error = InvocationError(
                f"Method {resolved.qualname} is not public, "
                "enable MF_ALLOW_PRIVATE_METHODS to invoke it"
            )
            return InvocationOutcome(OutcomeKind.DISPATCH_FAILURE, error=error)

        logger.debug("Invoking %s", resolved.qualname)
        try:
            value = resolved.func(*call_args, **call_kwargs)
        except Exception as e:
            logger.debug("%s raised %r", resolved.qualname, e)
            return InvocationOutcome(OutcomeKind.DOMAIN_FAILURE, error=e)
        return InvocationOutcome(OutcomeKind.RETURNED, value=value)

    def invoke_with_target_exception(self) -> Any:
        """Invoke and return the value, raising any failure as-is"""
        return self.invoke().unwrap()

    def _is_accessible(self, name: str) -> bool:
        if self.allow_private or not name.startswith("_"):
            return True
        return name.startswith("__") and name.endswith("__")

    def _call_arguments(self) -> tuple[tuple, dict]:
        prepared, self._prepared_arguments = self._prepared_arguments, None
        if prepared is not None:
            return prepared
        return self._raw_arguments()

    def _raw_arguments(self) -> tuple[tuple, dict]:
        args = tuple(_dereference(arg) for arg in self.arguments or ())
        kwargs = {
            key: _dereference(val)
            for key, val in (self.keyword_arguments or {}).items()
        }
        return args, kwargs


def _dereference(value: Any) -> Any:
    return value.get_object() if isinstance(value, ObjectFactory) else value
