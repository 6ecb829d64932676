import threading
from typing import Any

import pytest
from sample_targets import Account, InsufficientFundsError, MathUtils

from methodfactory import (
    ConfigurationError,
    InitializationError,
    LifecycleState,
    MethodInvokingBean,
    MethodInvokingFactory,
    NotReadyError,
    ResolutionError,
)


def test_singleton_invokes_once():
    factory = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[5], singleton=True
    )
    assert factory.state is LifecycleState.UNPREPARED

    factory.on_setup_complete()
    assert factory.state is LifecycleState.READY
    results = [factory.produce() for _ in range(5)]

    assert results == [25] * 5
    assert MathUtils.calls == 1


def test_singleton_returns_identical_object(counter):
    factory = MethodInvokingFactory(
        target_object=counter, target_method="fresh", singleton=True
    )
    factory.after_properties_set()

    assert factory.get_object() is factory.get_object()
    assert counter.count == 1


def test_prototype_invokes_every_time():
    factory = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[5], singleton=False
    )
    factory.on_setup_complete()
    assert MathUtils.calls == 0, "Setup should not invoke in prototype mode"

    assert [factory.produce() for _ in range(3)] == [25, 25, 25]
    assert MathUtils.calls == 3
    assert factory.state is LifecycleState.PREPARED


def test_prototype_returns_fresh_objects(counter):
    factory = MethodInvokingFactory(
        target_object=counter, target_method="fresh", singleton=False
    )
    first, second = factory.produce(), factory.produce()
    assert first == second == []
    assert first is not second
    assert counter.count == 2


def test_default_mode_from_settings(monkeypatch):
    from methodfactory import settings

    monkeypatch.setattr(settings, "MF_DEFAULT_SINGLETON", False)
    factory = MethodInvokingFactory(target_class=MathUtils, target_method="square")
    assert not factory.is_singleton()


def test_produce_before_setup_is_not_ready():
    factory = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[5], singleton=True
    )
    with pytest.raises(NotReadyError):
        factory.produce()
    assert MathUtils.calls == 0


def test_singleton_domain_failure_is_final():
    account = Account(balance=10)
    factory = MethodInvokingFactory(
        target_object=account,
        target_method="withdraw",
        arguments=[20],
        singleton=True,
    )

    with pytest.raises(InsufficientFundsError):
        factory.on_setup_complete()
    assert factory.state is LifecycleState.FAILED

    with pytest.raises(NotReadyError) as exc_info:
        factory.produce()
    assert isinstance(exc_info.value.__cause__, InsufficientFundsError)

    with pytest.raises(InitializationError):
        factory.on_setup_complete()
    assert account.withdrawals == 1, "A failed singleton is never re-invoked"


def test_prototype_domain_failure_per_call():
    account = Account(balance=25)
    factory = MethodInvokingFactory(
        target_object=account,
        target_method="withdraw",
        arguments=[10],
        singleton=False,
    )
    factory.on_setup_complete()

    assert factory.produce() == 15
    assert factory.produce() == 5
    with pytest.raises(InsufficientFundsError, match="Cannot withdraw 10"):
        factory.produce()
    assert factory.state is LifecycleState.PREPARED


def test_setup_resolution_failure():
    factory = MethodInvokingFactory(target_class=MathUtils, target_method="cube")
    with pytest.raises(ResolutionError):
        factory.on_setup_complete()
    assert factory.state is LifecycleState.UNPREPARED


def test_declared_result_type():
    factory = MethodInvokingFactory(
        static_method="sample_targets.MathUtils.square", arguments=[5]
    )
    assert factory.declared_result_type() is None
    assert factory.object_type is None

    factory.prepare()
    assert factory.declared_result_type() is int

    factory = MethodInvokingFactory(
        target_object=Account(), target_method="close", singleton=False
    )
    factory.on_setup_complete()
    assert factory.declared_result_type() is Any


def test_configure_mode():
    factory = MethodInvokingFactory(target_class=MathUtils, target_method="square")
    factory.configure(singleton=False)
    assert not factory.is_singleton()
    factory.configure(singleton=True)
    factory.arguments = [2]
    factory.on_setup_complete()

    with pytest.raises(ConfigurationError):
        factory.configure(singleton=False)


def test_concurrent_setup_invokes_once():
    factory = MethodInvokingFactory(
        target_class=MathUtils, target_method="square", arguments=[6], singleton=True
    )
    threads = [threading.Thread(target=factory.on_setup_complete) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert factory.produce() == 36
    assert MathUtils.calls == 1


def test_bean_runs_once():
    import sample_targets

    bean = MethodInvokingBean(
        target_class=sample_targets, target_method="register", arguments=["cache"]
    )
    bean.after_properties_set()
    bean.run_once()

    assert sample_targets.registered == ["cache"]
    assert bean.state is LifecycleState.READY


def test_bean_failure_is_not_retried():
    account = Account(balance=0)
    bean = MethodInvokingBean(
        target_object=account, target_method="withdraw", arguments=[1]
    )

    with pytest.raises(InsufficientFundsError):
        bean.run_once()
    with pytest.raises(InitializationError) as exc_info:
        bean.run_once()

    assert isinstance(exc_info.value.__cause__, InsufficientFundsError)
    assert account.withdrawals == 1
    assert bean.state is LifecycleState.FAILED


def test_bean_discards_result(counter):
    bean = MethodInvokingBean(target_object=counter, target_method="next")
    assert bean.run_once() is None
    assert counter.count == 1


def test_singleton_fatal_failure_is_final():
    factory = MethodInvokingFactory(
        target_object=Account(), target_method="close", singleton=True
    )

    with pytest.raises(SystemExit):
        factory.on_setup_complete()
    assert factory.state is LifecycleState.FAILED

    with pytest.raises(NotReadyError) as exc_info:
        factory.produce()
    assert isinstance(exc_info.value.__cause__, SystemExit)
    with pytest.raises(InitializationError):
        factory.on_setup_complete()


def test_prototype_argument_consumed_once_by_setup(counter):
    source = MethodInvokingFactory(
        target_object=counter, target_method="next", singleton=False
    )
    factory = MethodInvokingFactory(
        target_class=MathUtils,
        target_method="total",
        arguments=[source],
        singleton=False,
    )
    factory.on_setup_complete()

    assert factory.produce() == 1
    assert counter.count == 1
    assert factory.produce() == 2
