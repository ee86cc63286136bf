from datetime import datetime
from typing import Iterable

import pydantic

type RoleSet = frozenset[str]


class GrantRecord(pydantic.BaseModel):
    """One row of ``SHOW GRANTS`` output."""

    model_config = pydantic.ConfigDict(extra="ignore", frozen=True)

    resource_name: str | None = pydantic.Field(
        default=None,
        validation_alias=pydantic.AliasChoices("name", "resource_name"),
    )
    privilege: str
    grantee_name: str
    grant_option: bool = False
    granted_on: str | None = None
    granted_to: str | None = None
    created_on: datetime | None = None
    granted_by: str | None = None


def filter_known_grantees(
    records: Iterable[GrantRecord],
    declared_roles: RoleSet,
    privilege: str | None = None,
) -> RoleSet:
    """Roles from ``declared_roles`` that still hold a grant.

    Grantees that were never declared are dropped, so grants added out of
    band are never attributed to us. When ``privilege`` is given only
    records for that privilege count.
    """
    folded = privilege.casefold() if privilege is not None else None
    return frozenset(
        record.grantee_name
        for record in records
        if record.grantee_name in declared_roles
        and (folded is None or record.privilege.casefold() == folded)
    )
