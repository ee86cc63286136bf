import pytest

from grantsync import ExternalOperationError, GrantError
from grantsync.driver import apply, destroy
from grantsync.state import StateStore


@pytest.fixture
def store(tmp_path):
    return StateStore.open(tmp_path / "state.json")


def declare(resource, **grants):
    return {name: resource.parse_config(data) for name, data in grants.items()}


def test_first_apply_creates(db, account, resource, store):
    grants = declare(resource, monitoring={"roles": ["A", "B"]})
    changes = apply(db, resource, grants, store)
    assert [(c.name, c.action) for c in changes] == [("monitoring", "create")]
    assert changes[0].diff.to_add == {"A", "B"}
    assert set(account.grants) == {("MONITOR USAGE", "A"), ("MONITOR USAGE", "B")}
    reopened = StateStore.open(store.path)
    assert reopened.get("monitoring").roles == {"A", "B"}


def test_second_apply_is_noop(db, account, resource, store):
    grants = declare(resource, monitoring={"roles": ["A"]})
    apply(db, resource, grants, store)
    account.statements.clear()
    changes = apply(db, resource, grants, store)
    assert [c.action for c in changes] == ["noop"]
    assert account.statements == ["SHOW GRANTS ON ACCOUNT"]


def test_update_changes_roles(db, account, resource, store):
    apply(db, resource, declare(resource, m={"roles": ["A", "B"]}), store)
    account.statements.clear()
    changes = apply(db, resource, declare(resource, m={"roles": ["B", "C"]}), store)
    assert changes[0].action == "update"
    assert account.statements[1:3] == [
        'REVOKE MONITOR USAGE ON ACCOUNT FROM ROLE "A"',
        'GRANT MONITOR USAGE ON ACCOUNT TO ROLE "C"',
    ]
    assert store.get("m").roles == {"B", "C"}


def test_out_of_band_revoke_is_regranted(db, account, resource, store):
    grants = declare(resource, m={"roles": ["A", "B"]})
    apply(db, resource, grants, store)
    del account.grants[("MONITOR USAGE", "A")]
    changes = apply(db, resource, grants, store)
    assert changes[0].action == "update"
    assert changes[0].diff.to_add == {"A"}
    assert ("MONITOR USAGE", "A") in account.grants


def test_foreign_grants_are_left_alone(db, account, resource, store):
    account.grants[("MONITOR USAGE", "D")] = False
    apply(db, resource, declare(resource, m={"roles": ["A"]}), store)
    apply(db, resource, declare(resource, m={"roles": []}), store)
    assert account.grants == {("MONITOR USAGE", "D"): False}


def test_grant_option_change_replaces(db, account, resource, store):
    apply(db, resource, declare(resource, m={"roles": ["A"]}), store)
    grants = declare(resource, m={"roles": ["A"], "with_grant_option": True})
    changes = apply(db, resource, grants, store)
    assert changes[0].action == "replace"
    assert account.grants == {("MONITOR USAGE", "A"): True}
    assert store.get("m").id == "ACCOUNT|MONITOR USAGE|true"


def test_privilege_change_replaces(db, account, resource, store):
    apply(db, resource, declare(resource, m={"roles": ["A"]}), store)
    grants = declare(resource, m={"roles": ["A"], "privilege": "CREATE ROLE"})
    apply(db, resource, grants, store)
    assert account.grants == {("CREATE ROLE", "A"): False}


def test_undeclared_grants_are_deleted(db, account, resource, store):
    apply(db, resource, declare(resource, a={"roles": ["A"]}, b={"roles": ["B"]}), store)
    changes = apply(db, resource, declare(resource, a={"roles": ["A"]}), store)
    assert [(c.name, c.action) for c in changes] == [("a", "noop"), ("b", "delete")]
    assert store.names() == ["a"]
    assert set(account.grants) == {("MONITOR USAGE", "A")}


def test_dry_run_changes_nothing(db, account, resource, store):
    changes = apply(db, resource, declare(resource, m={"roles": ["A"]}), store, True)
    assert changes[0].action == "create"
    assert account.grants == {}
    assert not store.path.exists()


def test_failed_grant_keeps_previous_state(db, account, resource, store):
    apply(db, resource, declare(resource, m={"roles": ["A"]}), store)
    account.fail_on.add('TO ROLE "C"')
    with pytest.raises(ExternalOperationError):
        apply(db, resource, declare(resource, m={"roles": ["C"]}), store)
    # the revoke went through before the grant failed
    assert account.grants == {}
    assert StateStore.open(store.path).get("m").roles == {"A"}

    account.fail_on.clear()
    changes = apply(db, resource, declare(resource, m={"roles": ["C"]}), store)
    assert changes[0].diff.to_add == {"C"}
    assert changes[0].diff.to_revoke == frozenset()
    assert account.grants == {("MONITOR USAGE", "C"): False}


def test_destroy(db, account, resource, store):
    account.grants[("MONITOR USAGE", "D")] = False
    apply(db, resource, declare(resource, a={"roles": ["A"]}, b={"roles": ["B"]}), store)
    changes = destroy(db, resource, store)
    assert [(c.name, c.action) for c in changes] == [("a", "delete"), ("b", "delete")]
    assert account.grants == {("MONITOR USAGE", "D"): False}
    assert StateStore.open(store.path).names() == []


def test_update_without_stored_state_is_refused(db, resource, store, monkeypatch):
    monkeypatch.setattr(type(resource), "plan", lambda self, state, config: "update")
    with pytest.raises(GrantError, match="without stored state"):
        apply(db, resource, declare(resource, m={"roles": ["A"]}), store)
    assert not store.path.exists()
