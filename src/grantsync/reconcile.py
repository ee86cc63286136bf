import logging
from typing import NamedTuple, Protocol

from grantsync.identifier import GrantIdentifier
from grantsync.records import RoleSet

log = logging.getLogger(__name__)


class GrantOperations(Protocol):
    def revoke(self, privilege: str, roles: RoleSet) -> None: ...

    def grant(self, privilege: str, roles: RoleSet, with_option: bool) -> None: ...


class RoleDiff(NamedTuple):
    to_add: RoleSet
    to_revoke: RoleSet

    def __bool__(self) -> bool:
        return bool(self.to_add or self.to_revoke)


def role_diff(desired: RoleSet, declared: RoleSet) -> RoleDiff:
    return RoleDiff(
        to_add=frozenset(desired - declared),
        to_revoke=frozenset(declared - desired),
    )


def reconcile(
    desired: RoleSet,
    declared: RoleSet,
    identifier: GrantIdentifier,
    ops: GrantOperations,
) -> RoleDiff:
    """Move the grantees of ``identifier`` from ``declared`` to ``desired``.

    Revokes run before grants, so a role losing access never overlaps with
    one gaining it. A failed revoke propagates and no grant is attempted.
    The caller re-reads external state afterwards.
    """
    diff = role_diff(desired, declared)
    if not diff:
        log.debug("%s: roles unchanged", identifier)
        return diff
    log.debug(
        "%s: revoking %s, granting %s",
        identifier,
        sorted(diff.to_revoke),
        sorted(diff.to_add),
    )
    if diff.to_revoke:
        ops.revoke(identifier.privilege, diff.to_revoke)
    if diff.to_add:
        ops.grant(identifier.privilege, diff.to_add, identifier.grant_option)
    return diff
