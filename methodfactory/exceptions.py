class MethodFactoryError(Exception):
    """Base class of every error raised by methodfactory itself.

    Failures raised by the invoked target method are never wrapped in this
    hierarchy, they propagate with their original type.
    """


class ConfigurationError(MethodFactoryError, ValueError):
    """Target or method is missing, contradictory or changed after preparation"""


class ResolutionError(MethodFactoryError):
    """No candidate method matches the configured target, name and arguments"""


class ConversionError(MethodFactoryError, TypeError):
    """An argument value cannot be coerced to its parameter type"""

    def __init__(self, value, target_type, reason: str = ""):
        self.value = value
        self.target_type = target_type
        msg = f"Cannot convert {value!r} to {target_type!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class InvocationError(MethodFactoryError):
    """The resolved method could not be dispatched at all"""


class NotReadyError(MethodFactoryError):
    """A singleton producer was read before its first successful invocation"""

    def __init__(self, msg: str = "Factory is not fully initialized yet"):
        super().__init__(msg)


class InitializationError(MethodFactoryError):
    """A one-off initialization step failed and cannot be re-run"""
