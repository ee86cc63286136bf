import pytest

from grantsync import ACCOUNT_PRIVILEGES, ConfigError, PrivilegeSet


def test_account_privileges():
    assert len(ACCOUNT_PRIVILEGES) == 12
    assert "MONITOR USAGE" in ACCOUNT_PRIVILEGES
    assert "SELECT" not in ACCOUNT_PRIVILEGES
    assert ACCOUNT_PRIVILEGES.to_list() == sorted(ACCOUNT_PRIVILEGES.to_list())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("MONITOR USAGE", "MONITOR USAGE"),
        ("monitor usage", "MONITOR USAGE"),
        (" Create Role ", "CREATE ROLE"),
        ("all privileges", "ALL PRIVILEGES"),
    ],
)
def test_validate_canonicalizes(value, expected):
    assert ACCOUNT_PRIVILEGES.validate(value) == expected


def test_validate_rejects_unknown():
    with pytest.raises(ConfigError, match="SELECT"):
        ACCOUNT_PRIVILEGES.validate("SELECT")


def test_sets_are_independent_values():
    custom = PrivilegeSet.from_names("USAGE", "MONITOR")
    assert custom.validate("usage") == "USAGE"
    assert "USAGE" not in ACCOUNT_PRIVILEGES
    with pytest.raises(AttributeError):
        custom.names = frozenset()  # type: ignore[misc]
