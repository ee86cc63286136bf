"""Grant identifiers.

A grant identifier is the only durable state kept for a grant between
invocations. It packs three fields into one string, in this order, joined
by ``|``::

    <resource_name>|<privilege>|<grant_option>

``grant_option`` is written as ``true`` or ``false``. Privilege and grant
option are always recovered by parsing the identifier, never by querying
the access-control system.
"""

from dataclasses import dataclass
from typing import Self

from grantsync.errors import DecodingError, EncodingError

DELIMITER = "|"
FIELD_COUNT = 3
TRUE_TOKENS = frozenset({"true", "t", "1"})
FALSE_TOKENS = frozenset({"false", "f", "0"})


@dataclass(frozen=True, slots=True)
class GrantIdentifier:
    resource_name: str
    privilege: str
    grant_option: bool = False

    def __str__(self) -> str:
        return encode_grant_id(self.resource_name, self.privilege, self.grant_option)

    @classmethod
    def parse(cls, text: str) -> Self:
        return cls(*decode_grant_id(text))


def encode_grant_id(resource_name: str, privilege: str, grant_option: bool) -> str:
    for name, value in (("resource_name", resource_name), ("privilege", privilege)):
        if DELIMITER in value:
            raise EncodingError(
                f"{name} {value!r} must not contain the delimiter {DELIMITER!r}."
            )
    token = "true" if grant_option else "false"
    return DELIMITER.join((resource_name, privilege, token))


def parse_bool(token: str) -> bool:
    match token.casefold():
        case t if t in TRUE_TOKENS:
            return True
        case f if f in FALSE_TOKENS:
            return False
    raise DecodingError(f"Invalid grant option {token!r}, expected true or false.")


def decode_grant_id(text: str) -> tuple[str, str, bool]:
    fields = text.split(DELIMITER)
    if len(fields) != FIELD_COUNT:
        raise DecodingError(
            f"Grant id {text!r} has {len(fields)} fields, expected {FIELD_COUNT}."
        )
    resource_name, privilege, grant_option = fields
    return resource_name, privilege, parse_bool(grant_option)
