import logging
from dataclasses import dataclass

from grantsync.database import Database
from grantsync.records import RoleSet
from grantsync.statements import GrantBuilder

log = logging.getLogger(__name__)


@dataclass
class SqlGrantOperations:
    """Runs one GRANT or REVOKE per role, in role order.

    The first failing statement stops the batch and its error propagates.
    """

    database: Database
    builder: GrantBuilder

    def revoke(self, privilege: str, roles: RoleSet) -> None:
        for role in sorted(roles):
            log.info("revoke %s on %s from %s", privilege, self.builder.on, role)
            self.database.execute(self.builder.revoke(privilege, role))

    def grant(self, privilege: str, roles: RoleSet, with_option: bool) -> None:
        for role in sorted(roles):
            log.info("grant %s on %s to %s", privilege, self.builder.on, role)
            self.database.execute(self.builder.grant(privilege, role, with_option))
