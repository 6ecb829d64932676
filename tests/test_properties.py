import pytest

from methodfactory import LifecycleState, NotReadyError, PropertiesFactory


@pytest.fixture
def sources():
    return [{"host": "localhost", "port": "5432"}, {"port": "6543"}]


def test_properties_merge_order(sources):
    factory = PropertiesFactory(
        properties=sources, local_properties={"host": "db", "user": "app"}
    )
    assert factory.merge_properties() == {
        "host": "localhost",
        "port": "6543",
        "user": "app",
    }

    factory.local_override = True
    assert factory.merge_properties()["host"] == "db"


def test_properties_singleton(sources):
    factory = PropertiesFactory(properties=sources, singleton=True)
    with pytest.raises(NotReadyError):
        factory.get_object()

    factory.after_properties_set()
    assert factory.state is LifecycleState.READY
    assert factory.get_object() is factory.get_object()
    assert factory.declared_result_type() is dict


def test_properties_prototype(sources):
    factory = PropertiesFactory(properties=sources, singleton=False)
    factory.after_properties_set()

    first = factory.get_object()
    first["port"] = "1"
    assert factory.get_object()["port"] == "6543"
    assert factory.state is LifecycleState.PREPARED
