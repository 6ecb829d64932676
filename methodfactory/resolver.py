import inspect
import logging
import threading
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .conversion import (
    CONVERSION_WEIGHT,
    PydanticTypeConverter,
    TypeConverter,
    is_unconstrained,
    type_difference_weight,
)
from .exceptions import (
    ConfigurationError,
    ConversionError,
    InvocationError,
    ResolutionError,
)
from .lookup import Candidate, MethodLookup

logger = logging.getLogger(__name__)


class ResolvedMethod(BaseModel):
    """The method chosen for an invocation target

    Attributes:
        name: the configured method name
        func: the callable to invoke, already bound to its target
        signature: introspected signature, None for opaque builtins
        return_type: declared return annotation, `typing.Any` when absent
        target: the class, module or object the method belongs to
        static: whether `target` is a class/module rather than an instance
        weight: type difference weight the arguments had against this method
        dispatch_type: type a singledispatch implementation is registered for,
            None for plain callables
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    func: Callable[..., Any]
    signature: Optional[inspect.Signature] = None
    return_type: Any = Field(default=Any)
    target: Any = None
    static: bool = True
    weight: int = 0
    dispatch_type: Any = None

    @property
    def qualname(self) -> str:
        return getattr(self.func, "__qualname__", self.name)


def convert_arguments(
    signature: Optional[inspect.Signature],
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
    converter: TypeConverter,
    dispatch_type: Any = None,
) -> tuple[tuple, dict, int]:
    """Bind raw arguments to a signature and convert each to its parameter type

    `dispatch_type` stands in for the annotation of an unannotated first
    positional parameter, as singledispatch dispatches on that argument.

    Returns:
        converted positional arguments, converted keyword arguments and the
        total type difference weight

    Raises:
        TypeError: the arguments do not bind to the signature
        ConversionError: an argument cannot be converted
    """
    if signature is None:
        weight = CONVERSION_WEIGHT * (len(args) + len(kwargs) + 1)
        return tuple(args), dict(kwargs), weight

    bound = signature.bind(*args, **kwargs)
    dispatched = None if dispatch_type is None else _dispatch_parameter(signature)
    weight = 0
    for name, value in bound.arguments.items():
        param = signature.parameters[name]
        annotation = param.annotation
        if name == dispatched and is_unconstrained(annotation):
            annotation = dispatch_type
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            items = [_convert(item, annotation, converter) for item in value]
            bound.arguments[name] = tuple(item for item, _ in items)
            weight += sum(w for _, w in items)
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            items = {
                key: _convert(item, annotation, converter)
                for key, item in value.items()
            }
            bound.arguments[name] = {key: item for key, (item, _) in items.items()}
            weight += sum(w for _, w in items.values())
        else:
            bound.arguments[name], w = _convert(value, annotation, converter)
            weight += w

    return bound.args, bound.kwargs, weight


def _dispatch_parameter(signature: inspect.Signature) -> Optional[str]:
    params = list(signature.parameters.values())
    if params and params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return params[0].name
    return None


def _convert(value: Any, annotation: Any, converter: TypeConverter) -> tuple[Any, int]:
    weight = type_difference_weight(value, annotation)
    if weight is not None:
        return value, weight
    return converter.convert(value, annotation), CONVERSION_WEIGHT


class ArgumentResolver:
    """Pick the method an invocation target refers to, once

    Every candidate that accepts the arguments is weighted with
    `convert_arguments`: unconverted arguments cost their subclass distance to
    the declared type, converted ones cost `CONVERSION_WEIGHT`. The lightest
    candidate wins and equal weights go to the candidate registered first.
    """

    def __init__(
        self,
        converter: Optional[TypeConverter] = None,
        lookup: Optional[MethodLookup] = None,
    ):
        self.converter = converter or PydanticTypeConverter()
        self.lookup = lookup or MethodLookup()
        self._resolved: Optional[ResolvedMethod] = None
        self._lock = threading.Lock()

    @property
    def resolved(self) -> Optional[ResolvedMethod]:
        return self._resolved

    def is_prepared(self) -> bool:
        return self._resolved is not None

    def prepare(
        self,
        target_class: Any = None,
        target_object: Any = None,
        method: Optional[str] = None,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> ResolvedMethod:
        """Resolve the method, or return the method resolved earlier"""
        if self._resolved is not None:
            return self._resolved

        with self._lock:
            if self._resolved is None:
                self._resolved = self._resolve(
                    target_class, target_object, method, args, kwargs or {}
                )
        return self._resolved

    def convert(
        self, resolved: ResolvedMethod, args: Sequence[Any], kwargs: Mapping[str, Any]
    ) -> tuple[tuple, dict]:
        """Convert raw arguments for a call of the resolved method

        Raises:
            InvocationError: the arguments no longer bind to the method
            ConversionError: an argument cannot be converted
        """
        try:
            call_args, call_kwargs, _ = convert_arguments(
                resolved.signature,
                args,
                kwargs,
                self.converter,
                resolved.dispatch_type,
            )
        except ConversionError:
            raise
        except TypeError as e:
            raise InvocationError(
                f"Cannot call {resolved.qualname} with the given arguments: {e}"
            ) from e
        return call_args, call_kwargs

    def _resolve(
        self,
        target_class: Any,
        target_object: Any,
        method: Optional[str],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> ResolvedMethod:
        if target_class is not None and target_object is not None:
            raise ConfigurationError(
                "Specify either a target class or a target object, not both"
            )
        if target_class is None and target_object is None:
            raise ConfigurationError(
                "Either 'target_class' or 'target_object' is required"
            )
        if not method:
            raise ConfigurationError("Property 'target_method' is required")

        static = target_object is None
        target = target_class if static else target_object
        if isinstance(target, str) and static:
            target = self.lookup.resolve_class(target)

        best: Optional[Candidate] = None
        best_weight = 0
        mismatches = []
        for candidate in self.lookup.candidates(target, method, static):
            try:
                _, _, weight = convert_arguments(
                    candidate.signature,
                    args,
                    kwargs,
                    self.converter,
                    candidate.dispatch_type,
                )
            except TypeError as e:
                # ConversionError included
                mismatches.append(str(e))
                continue
            if best is None or weight < best_weight:
                best, best_weight = candidate, weight

        if best is None:
            detail = "; ".join(mismatches)
            raise ResolutionError(
                f"No method {method!r} accepts {len(args)} positional and "
                f"{len(kwargs)} keyword argument(s): {detail}"
            )

        resolved = ResolvedMethod(
            name=method,
            func=best.func,
            signature=best.signature,
            return_type=best.return_type,
            target=target,
            static=static,
            weight=best_weight,
            dispatch_type=best.dispatch_type,
        )
        logger.debug(
            "Resolved %r to %s (weight %d)", method, resolved.qualname, best_weight
        )
        return resolved
