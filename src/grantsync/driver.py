"""Walk declared grants and converge the account onto them.

Each grant is handled on its own and the state file is saved after every
step that succeeds. A failure stops the run with the failing grant's stored
state untouched, so running again retries the same change.
"""

import logging
from typing import Mapping, NamedTuple

from grantsync.database import Database
from grantsync.errors import GrantError
from grantsync.reconcile import RoleDiff, role_diff
from grantsync.resource import Action, GrantConfig, GrantResource, GrantState
from grantsync.state import StateStore

log = logging.getLogger(__name__)


class Change(NamedTuple):
    name: str
    action: Action
    diff: RoleDiff


def apply(
    db: Database,
    resource: GrantResource,
    grants: Mapping[str, GrantConfig],
    store: StateStore,
    dry_run: bool = False,
) -> list[Change]:
    changes: list[Change] = []
    for name in sorted(grants):
        config = grants[name]
        state = store.get(name)
        if state is not None:
            state = resource.read(db, state)
        action = resource.plan(state, config)
        current = state.roles if state is not None else frozenset()
        change = Change(name, action, role_diff(config.roles, current))
        changes.append(change)
        log.info("%s: %s", name, action)
        if dry_run or action == "noop":
            continue
        match (action, state):
            case ("create", _):
                state = resource.create(db, config)
            case ("update", GrantState() as current):
                state = resource.update(db, current, config)
            case ("replace", GrantState() as current):
                resource.delete(db, current)
                store.remove(name)
                store.save()
                state = resource.create(db, config)
            case _:
                raise GrantError(f"{name}: cannot {action} without stored state.")
        store.put(name, state)
        store.save()

    for name in store.names():
        if name in grants:
            continue
        changes.extend(destroy_one(db, resource, store, name, dry_run))
    return changes


def destroy_one(
    db: Database,
    resource: GrantResource,
    store: StateStore,
    name: str,
    dry_run: bool = False,
) -> list[Change]:
    state = store.get(name)
    if state is None:
        return []
    log.info("%s: delete", name)
    change = Change(name, "delete", role_diff(frozenset(), state.roles))
    if not dry_run:
        resource.delete(db, state)
        store.remove(name)
        store.save()
    return [change]


def destroy(
    db: Database,
    resource: GrantResource,
    store: StateStore,
    dry_run: bool = False,
) -> list[Change]:
    changes: list[Change] = []
    for name in store.names():
        changes.extend(destroy_one(db, resource, store, name, dry_run))
    return changes
