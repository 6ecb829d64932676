import pytest

import sample_targets


@pytest.fixture(autouse=True)
def reset_sample_targets():
    sample_targets.MathUtils.calls = 0
    sample_targets.registered.clear()
    yield


@pytest.fixture
def account():
    return sample_targets.Account(balance=100.0)


@pytest.fixture
def counter():
    return sample_targets.Counter()
