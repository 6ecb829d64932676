from .conversion import PydanticTypeConverter, TypeConverter
from .exceptions import (
    ConfigurationError,
    ConversionError,
    InitializationError,
    InvocationError,
    MethodFactoryError,
    NotReadyError,
    ResolutionError,
)
from .factories import MethodInvokingBean, MethodInvokingFactory
from .invoker import InvocationOutcome, MethodInvoker, OutcomeKind
from .lifecycle import LifecycleGuard, LifecycleState, ObjectFactory
from .lookup import MethodLookup
from .properties import PropertiesFactory
from .registry import Registry
from .resolver import ArgumentResolver, ResolvedMethod

__version__ = "0.1.0"

__all__ = [
    "ArgumentResolver",
    "ConfigurationError",
    "ConversionError",
    "InitializationError",
    "InvocationError",
    "InvocationOutcome",
    "LifecycleGuard",
    "LifecycleState",
    "MethodFactoryError",
    "MethodInvoker",
    "MethodInvokingBean",
    "MethodInvokingFactory",
    "MethodLookup",
    "NotReadyError",
    "ObjectFactory",
    "OutcomeKind",
    "PropertiesFactory",
    "PydanticTypeConverter",
    "Registry",
    "ResolutionError",
    "ResolvedMethod",
    "TypeConverter",
]
