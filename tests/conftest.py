import pytest

from vmpc.mpc_core import Field, Prg


@pytest.fixture
def field():
    return Field()


@pytest.fixture
def prg():
    return Prg(b"vmpc-tests")
