import dataclasses
from typing import Protocol


class Executor(Protocol):
    def execute(self, sql: str) -> object: ...


def quote_identifier(name: str) -> str:
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


@dataclasses.dataclass(frozen=True)
class Statement:
    def execute(self, executor: Executor) -> object:
        return executor.execute(str(self))


@dataclasses.dataclass(frozen=True)
class ShowGrants(Statement):
    on: str

    def __str__(self) -> str:
        return f"SHOW GRANTS ON {self.on}"


@dataclasses.dataclass(frozen=True)
class GrantPrivilege(Statement):
    privilege: str
    on: str
    role: str
    with_grant_option: bool = False

    def __str__(self) -> str:
        role = quote_identifier(self.role)
        stmt = f"GRANT {self.privilege} ON {self.on} TO ROLE {role}"
        stmt += " WITH GRANT OPTION" if self.with_grant_option else ""
        return stmt


@dataclasses.dataclass(frozen=True)
class RevokePrivilege(Statement):
    privilege: str
    on: str
    role: str

    def __str__(self) -> str:
        role = quote_identifier(self.role)
        return f"REVOKE {self.privilege} ON {self.on} FROM ROLE {role}"


@dataclasses.dataclass(frozen=True)
class GrantBuilder:
    """Renders the statements for grants on one kind of resource."""

    on: str

    def show(self) -> ShowGrants:
        return ShowGrants(on=self.on)

    def grant(
        self, privilege: str, role: str, with_grant_option: bool = False
    ) -> GrantPrivilege:
        return GrantPrivilege(
            privilege=privilege,
            on=self.on,
            role=role,
            with_grant_option=with_grant_option,
        )

    def revoke(self, privilege: str, role: str) -> RevokePrivilege:
        return RevokePrivilege(privilege=privilege, on=self.on, role=role)


def account_grant_builder() -> GrantBuilder:
    return GrantBuilder(on="ACCOUNT")
