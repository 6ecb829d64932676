import pytest
from sample_targets import MathUtils

from methodfactory import (
    ConfigurationError,
    MethodInvokingFactory,
    NotReadyError,
    PropertiesFactory,
    Registry,
    ResolutionError,
)


def test_registry_initialize_and_get():
    registry = Registry(
        {
            "square": MethodInvokingFactory(
                target_class=MathUtils,
                target_method="square",
                arguments=[4],
                singleton=True,
            ),
            "settings": PropertiesFactory(local_properties={"debug": True}),
        }
    )
    assert "square" in registry
    assert list(registry) == ["square", "settings"]

    registry.initialize()
    registry.initialize()

    assert registry.get_object("square") == 16
    assert registry.get_object("settings") == {"debug": True}
    assert MathUtils.calls == 1


def test_registry_references_in_order():
    base = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[2], singleton=True
    )
    derived = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[base], singleton=True
    )

    registry = Registry()
    registry.register("base", base)
    registry.register("derived", derived)
    registry.initialize()

    assert registry.get_object("derived") == 16


def test_registry_premature_reference():
    base = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[2], singleton=True
    )
    derived = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[base], singleton=True
    )

    registry = Registry({"derived": derived, "base": base})
    with pytest.raises(NotReadyError):
        registry.initialize()
    assert MathUtils.calls == 0


def test_registry_errors():
    registry = Registry()
    registry.register("props", PropertiesFactory())

    with pytest.raises(ConfigurationError):
        registry.register("props", PropertiesFactory())
    with pytest.raises(ResolutionError):
        registry.get("missing")
