import inspect
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Optional, get_origin

from pydantic import (
    ConfigDict,
    PydanticSchemaGenerationError,
    PydanticUndefinedAnnotation,
    PydanticUserError,
    TypeAdapter,
    ValidationError,
)

from . import settings
from .exceptions import ConversionError

logger = logging.getLogger(__name__)

# weight added for every argument that has to go through the converter, large
# enough that any chain of subclass hops still ranks below one conversion
CONVERSION_WEIGHT = 1024


class TypeConverter(ABC):
    """Convert a raw value to the type declared by a parameter"""

    @abstractmethod
    def convert(self, value: Any, target_type: Any) -> Any:
        """Return `value` coerced to `target_type`

        Raises:
            ConversionError: when the value cannot be coerced
        """
        ...


@lru_cache(maxsize=256)
def _type_adapter(target_type: Any) -> TypeAdapter:
    try:
        return TypeAdapter(target_type)
    except PydanticSchemaGenerationError:
        # plain user classes: validation degrades to an isinstance check
        return TypeAdapter(
            target_type, config=ConfigDict(arbitrary_types_allowed=True)
        )


class PydanticTypeConverter(TypeConverter):
    """Type converter backed by pydantic's TypeAdapter

    Lax mode by default, so `"5"` converts to `5` for an `int` parameter. Set
    `strict=True` (or `MF_STRICT_CONVERSION`) to only accept values pydantic
    considers exact matches.
    """

    def __init__(self, strict: Optional[bool] = None):
        self.strict = settings.MF_STRICT_CONVERSION if strict is None else strict

    def convert(self, value: Any, target_type: Any) -> Any:
        if is_unconstrained(target_type):
            return value

        try:
            adapter = _type_adapter(target_type)
        except (PydanticUserError, PydanticUndefinedAnnotation, TypeError) as e:
            raise ConversionError(value, target_type, str(e)) from e

        try:
            return adapter.validate_python(value, strict=self.strict)
        except (PydanticUserError, PydanticUndefinedAnnotation) as e:
            # forward references that never resolve fail on first use
            raise ConversionError(value, target_type, str(e)) from e
        except ValidationError as e:
            logger.debug("Conversion of %r to %r failed: %s", value, target_type, e)
            raise ConversionError(
                value, target_type, f"{e.error_count()} validation error(s)"
            ) from e

    def __repr__(self):
        return f"{self.__class__.__name__}(strict={self.strict})"


def is_unconstrained(annotation: Any) -> bool:
    """Whether a parameter annotation accepts anything as-is"""
    return annotation is inspect.Parameter.empty or annotation is Any


def is_plain_type(annotation: Any) -> bool:
    # `list[int]` passes isinstance(..., type) on older interpreters
    return isinstance(annotation, type) and get_origin(annotation) is None


def type_difference_weight(value: Any, annotation: Any) -> Optional[int]:
    """Weight of passing `value` to a parameter declared as `annotation`
    without conversion

    Unconstrained parameters count as `object`, and so do types that refuse
    isinstance checks, such as protocols that are not runtime checkable.

    Returns:
        the number of hops up `type(value).__mro__` to the declared type (0
        for an exact match), `len(__mro__)` for virtual subclasses, and None
        when the value must be converted.
    """
    mro = type(value).__mro__
    if is_unconstrained(annotation):
        return len(mro) - 1
    if not is_plain_type(annotation):
        return None
    try:
        matches = isinstance(value, annotation)
    except TypeError:
        return len(mro) - 1
    if not matches:
        return None

    if annotation in mro:
        return mro.index(annotation)
    return len(mro)
