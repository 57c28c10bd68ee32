from unittest.mock import AsyncMock, Mock

import nkeys
import pytest

from eventd_debug_tools import set_level
from eventd_sdk import client as client_module
from eventd_sdk.options import get_options

# User seed from the nats.py test suite
USER_SEED = "SUAEIV5COV7ADQZE52WTYHVJQRV7WKJE5J7IBBJGATJTUUT2LVFGVXDPRQ"


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    for name in ("EVENTD_CONFIG_FILE", "EVENTD_HOST", "EVENTD_PORT", "EVENTD_DISABLED",
                 "EVENTD_NKEY_FILE", "EVENTD_NKEY", "EVENTD_CONNECT_TIMEOUT", "APP_RUN_IN_CLI"):
        monkeypatch.delenv(name, raising=False)
    get_options.cache_clear()
    client_module.set_global_client(None)
    set_level("INFO")
    yield
    get_options.cache_clear()
    client_module.set_global_client(None)


@pytest.fixture
def user_seed():
    return USER_SEED


@pytest.fixture
def user_public_key():
    kp = nkeys.from_seed(bytearray(USER_SEED.encode()))
    return kp.public_key.decode()


@pytest.fixture
def account_seed():
    return nkeys.encode_seed(bytes(range(32)), prefix=nkeys.PREFIX_BYTE_ACCOUNT).decode()


@pytest.fixture
def nats_connection():
    """Stand-in for a nats-py connection."""
    nc = Mock()
    nc.connect = AsyncMock()
    nc.publish = AsyncMock()
    nc.subscribe = AsyncMock(return_value=Mock(name="subscription"))
    nc.drain = AsyncMock()
    nc.close = AsyncMock()
    nc.is_connected = True
    nc.is_closed = False
    nc.client_id = 42
    return nc


@pytest.fixture
def connection_factory(nats_connection):
    return Mock(return_value=nats_connection)
