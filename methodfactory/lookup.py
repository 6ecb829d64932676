import importlib
import inspect
import logging
import types
from functools import singledispatchmethod
from typing import Any, Callable, NamedTuple, Optional

from theflow.utils.modules import import_dotted_string

from .exceptions import ResolutionError

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    """A callable that may serve a method name, with its introspected signature"""

    func: Callable[..., Any]
    signature: Optional[inspect.Signature]
    return_type: Any
    dispatch_type: Any = None


class MethodLookup:
    """Resolve target classes by name and enumerate the candidates of a method

    A plain function or method gives a single candidate. A
    `functools.singledispatch` function or `functools.singledispatchmethod`
    gives one candidate per registered implementation, in registration order.
    """

    def resolve_class(self, name: str) -> Any:
        """Import a class (or module) from its dotted path"""
        if "." not in name:
            try:
                return importlib.import_module(name)
            except ImportError as e:
                raise ResolutionError(f"Cannot resolve target class {name!r}") from e

        try:
            return import_dotted_string(name, safe=False)
        except (ImportError, AttributeError, ValueError) as e:
            # dotted module paths such as "os.path" or "xml.etree"
            try:
                return importlib.import_module(name)
            except ImportError:
                raise ResolutionError(f"Cannot resolve target class {name!r}") from e

    def candidates(self, target: Any, name: str, static: bool) -> list[Candidate]:
        """List the callables named `name` on `target`

        Args:
            target: class or module for static calls, any object otherwise
            name: attribute name of the method
            static: whether `target` is a class/module rather than an instance

        Raises:
            ResolutionError: missing attribute, non-callable attribute, or an
                instance method requested without a target object
        """
        try:
            raw = inspect.getattr_static(target, name)
        except AttributeError as e:
            raise ResolutionError(
                f"{_describe(target)} has no method named {name!r}"
            ) from e

        if static and inspect.isclass(target) and _requires_instance(raw):
            raise ResolutionError(
                f"Method {name!r} of {_describe(target)} is not static, "
                "set a target object to invoke it"
            )

        dispatcher = _dispatcher(raw)
        if dispatcher is None:
            funcs = [(getattr(target, name), None)]
        else:
            # one implementation may be registered for several types
            impls = {}
            for cls, impl in dispatcher.registry.items():
                impls.setdefault(impl, cls)
            funcs = [
                (_bind(impl, target, static), cls) for impl, cls in impls.items()
            ]
            logger.debug(
                "%s.%s has %d registered implementations",
                _describe(target),
                name,
                len(funcs),
            )

        candidates = []
        for func, dispatch_type in funcs:
            if not callable(func):
                raise ResolutionError(
                    f"Attribute {name!r} of {_describe(target)} is not callable"
                )
            signature = _signature(func)
            candidates.append(
                Candidate(
                    func, signature, _return_type(func, signature), dispatch_type
                )
            )
        return candidates


def _describe(target: Any) -> str:
    if inspect.isclass(target) or inspect.ismodule(target):
        return target.__name__
    return f"{type(target).__name__} instance"


def _requires_instance(raw: Any) -> bool:
    if isinstance(raw, singledispatchmethod):
        raw = raw.func
    return isinstance(
        raw,
        (types.FunctionType, types.MethodDescriptorType, types.WrapperDescriptorType),
    )


def _dispatcher(raw: Any) -> Any:
    if isinstance(raw, singledispatchmethod):
        return raw.dispatcher
    if hasattr(raw, "registry") and hasattr(raw, "dispatch"):
        return raw
    return None


def _bind(impl: Any, target: Any, static: bool) -> Any:
    if static:
        if isinstance(impl, (staticmethod, classmethod)):
            return impl.__get__(None, target)
        return impl
    if hasattr(impl, "__get__"):
        return impl.__get__(target, type(target))
    return impl


def _signature(func: Callable[..., Any]) -> Optional[inspect.Signature]:
    try:
        try:
            return inspect.signature(func, eval_str=True)
        except NameError:
            # unresolvable forward references stay as strings
            return inspect.signature(func)
    except (ValueError, TypeError):
        # some builtins expose no signature
        return None


def _return_type(func: Callable[..., Any], signature: Optional[inspect.Signature]):
    if inspect.isclass(func):
        return func
    if signature is None or signature.return_annotation is inspect.Signature.empty:
        return Any
    if signature.return_annotation is None:
        return type(None)
    return signature.return_annotation
