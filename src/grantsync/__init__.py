from grantsync.errors import (
    ConfigError,
    DecodingError,
    EncodingError,
    ExternalOperationError,
    GrantError,
)
from grantsync.identifier import GrantIdentifier, decode_grant_id, encode_grant_id
from grantsync.privileges import ACCOUNT_PRIVILEGES, PrivilegeSet
from grantsync.records import GrantRecord, RoleSet, filter_known_grantees
from grantsync.reconcile import GrantOperations, RoleDiff, reconcile, role_diff
from grantsync.resource import GrantConfig, GrantResource, GrantState, account_grant
import grantsync.config as config
import grantsync.database as database


__all__ = [
    "ACCOUNT_PRIVILEGES",
    "ConfigError",
    "DecodingError",
    "EncodingError",
    "ExternalOperationError",
    "GrantConfig",
    "GrantError",
    "GrantIdentifier",
    "GrantOperations",
    "GrantRecord",
    "GrantResource",
    "GrantState",
    "PrivilegeSet",
    "RoleDiff",
    "RoleSet",
    "account_grant",
    "config",
    "database",
    "decode_grant_id",
    "encode_grant_id",
    "filter_known_grantees",
    "reconcile",
    "role_diff",
]
