from dataclasses import dataclass, field, replace
from typing import Any, Literal, Mapping, Self

import pydantic
import pydantic.dataclasses

from grantsync.database import Database, typeadapter
from grantsync.errors import ConfigError
from grantsync.identifier import GrantIdentifier, encode_grant_id
from grantsync.operations import SqlGrantOperations
from grantsync.privileges import (
    ACCOUNT_PRIVILEGES,
    ALL_PRIVILEGES,
    MONITOR_USAGE,
    PrivilegeSet,
)
from grantsync.reconcile import reconcile
from grantsync.records import GrantRecord, RoleSet, filter_known_grantees
from grantsync.statements import GrantBuilder, account_grant_builder

type Action = Literal["create", "update", "replace", "noop", "delete"]


@pydantic.dataclasses.dataclass(
    frozen=True, config=pydantic.ConfigDict(extra="forbid")
)
class GrantConfig:
    """Declared state of one grant.

    ``privilege`` is checked against the ``PrivilegeSet`` passed as the
    ``privileges`` validation context.
    """

    privilege: str
    roles: frozenset[str] = frozenset()
    with_grant_option: bool = False

    @pydantic.field_validator("privilege")
    @classmethod
    def check_privilege(cls, value: str, info: pydantic.ValidationInfo) -> str:
        privileges = (info.context or {}).get("privileges")
        if privileges is None:
            return value
        return privileges.validate(value)


@dataclass(frozen=True)
class GrantState:
    id: str
    privilege: str
    with_grant_option: bool
    roles: RoleSet = field(default_factory=frozenset)

    @classmethod
    def from_id(cls, grant_id: str, roles: RoleSet = frozenset()) -> Self:
        identifier = GrantIdentifier.parse(grant_id)
        return cls(
            id=grant_id,
            privilege=identifier.privilege,
            with_grant_option=identifier.grant_option,
            roles=frozenset(roles),
        )

    @property
    def identifier(self) -> GrantIdentifier:
        return GrantIdentifier.parse(self.id)


@dataclass(frozen=True)
class GrantResource:
    """Lifecycle of grants of one privilege on one kind of resource."""

    resource_name: str
    builder: GrantBuilder
    valid_privileges: PrivilegeSet
    default_privilege: str

    def parse_config(self, data: Mapping[str, Any]) -> GrantConfig:
        try:
            return typeadapter(GrantConfig).validate_python(
                {"privilege": self.default_privilege, **data},
                context={"privileges": self.valid_privileges},
            )
        except pydantic.ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def operations(self, db: Database) -> SqlGrantOperations:
        return SqlGrantOperations(db, self.builder)

    def create(self, db: Database, config: GrantConfig) -> GrantState:
        grant_id = encode_grant_id(
            self.resource_name, config.privilege, config.with_grant_option
        )
        if config.roles:
            self.operations(db).grant(
                config.privilege, config.roles, config.with_grant_option
            )
        return self.read(db, GrantState.from_id(grant_id, config.roles))

    def read(self, db: Database, state: GrantState) -> GrantState:
        # privilege and grant option come from the id, roles from the account
        identifier = GrantIdentifier.parse(state.id)
        records = db.query(self.builder.show(), GrantRecord)
        privilege: str | None = identifier.privilege
        if identifier.privilege.casefold() == ALL_PRIVILEGES.casefold():
            privilege = None
        return GrantState(
            id=state.id,
            privilege=identifier.privilege,
            with_grant_option=identifier.grant_option,
            roles=filter_known_grantees(records, state.roles, privilege),
        )

    def update(
        self, db: Database, state: GrantState, config: GrantConfig
    ) -> GrantState:
        # roles are the only thing an update can change
        if config.roles == state.roles:
            return state
        reconcile(config.roles, state.roles, state.identifier, self.operations(db))
        return self.read(db, replace(state, roles=config.roles))

    def delete(self, db: Database, state: GrantState) -> None:
        identifier = state.identifier
        if state.roles:
            self.operations(db).revoke(identifier.privilege, state.roles)

    def import_state(self, grant_id: str, roles: RoleSet = frozenset()) -> GrantState:
        identifier = GrantIdentifier.parse(grant_id)
        if identifier.resource_name != self.resource_name:
            raise ConfigError(
                f"Grant id {grant_id!r} is not a grant on {self.resource_name}."
            )
        privilege = self.valid_privileges.validate(identifier.privilege)
        canonical = encode_grant_id(
            self.resource_name, privilege, identifier.grant_option
        )
        return GrantState.from_id(canonical, roles)

    def plan(self, state: GrantState | None, config: GrantConfig | None) -> Action:
        if state is None:
            return "create"
        if config is None:
            return "delete"
        if (
            state.privilege.casefold() != config.privilege.casefold()
            or state.with_grant_option != config.with_grant_option
        ):
            return "replace"
        if state.roles != config.roles:
            return "update"
        return "noop"


def account_grant() -> GrantResource:
    return GrantResource(
        resource_name="ACCOUNT",
        builder=account_grant_builder(),
        valid_privileges=ACCOUNT_PRIVILEGES,
        default_privilege=MONITOR_USAGE,
    )
