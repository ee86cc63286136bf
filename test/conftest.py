import pytest

import fakedb
import grantsync
from grantsync.database import Database


@pytest.fixture(autouse=True)
def accounts():
    fakedb.ACCOUNTS.clear()
    yield fakedb.ACCOUNTS
    fakedb.ACCOUNTS.clear()


@pytest.fixture
def account(accounts) -> fakedb.Account:
    return accounts.setdefault("acme", fakedb.Account())


@pytest.fixture
def db(account):
    with Database(fakedb.connect, {"account": "acme"}) as database:
        yield database


@pytest.fixture
def resource() -> grantsync.GrantResource:
    return grantsync.account_grant()
