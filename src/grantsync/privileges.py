from dataclasses import dataclass
from typing import Self

from grantsync.errors import ConfigError

ALL_PRIVILEGES = "ALL PRIVILEGES"

CREATE_ROLE = "CREATE ROLE"
CREATE_USER = "CREATE USER"
CREATE_WAREHOUSE = "CREATE WAREHOUSE"
CREATE_DATABASE = "CREATE DATABASE"
CREATE_INTEGRATION = "CREATE INTEGRATION"
MANAGE_GRANTS = "MANAGE GRANTS"
MONITOR_USAGE = "MONITOR USAGE"
MONITOR_EXECUTION = "MONITOR EXECUTION"
EXECUTE_TASK = "EXECUTE TASK"
APPLY_MASKING_POLICY = "APPLY MASKING POLICY"
CREATE_SHARE = "CREATE SHARE"
IMPORT_SHARE = "IMPORT SHARE"


@dataclass(frozen=True, slots=True)
class PrivilegeSet:
    """Closed set of privileges valid for one kind of resource."""

    names: frozenset[str]

    @classmethod
    def from_names(cls, *names: str) -> Self:
        return cls(frozenset(names))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self.names)

    def to_list(self) -> list[str]:
        return sorted(self.names)

    def lookup(self, name: str) -> str | None:
        folded = name.strip().casefold()
        return next((n for n in self.names if n.casefold() == folded), None)

    def validate(self, value: str) -> str:
        """Return the canonical spelling of ``value``.

        Matching ignores case. ``ALL PRIVILEGES`` is accepted for every set.
        """
        if value.strip().casefold() == ALL_PRIVILEGES.casefold():
            return ALL_PRIVILEGES
        canonical = self.lookup(value)
        if canonical is None:
            raise ConfigError(
                f"Expected privilege to be one of {self.to_list()}, got {value!r}."
            )
        return canonical


ACCOUNT_PRIVILEGES = PrivilegeSet.from_names(
    CREATE_ROLE,
    CREATE_USER,
    CREATE_WAREHOUSE,
    CREATE_DATABASE,
    CREATE_INTEGRATION,
    MANAGE_GRANTS,
    MONITOR_USAGE,
    MONITOR_EXECUTION,
    EXECUTE_TASK,
    APPLY_MASKING_POLICY,
    CREATE_SHARE,
    IMPORT_SHARE,
)
