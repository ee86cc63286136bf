from unittest.mock import MagicMock

from grantsync.statements import account_grant_builder, quote_identifier


def test_show():
    assert str(account_grant_builder().show()) == "SHOW GRANTS ON ACCOUNT"


def test_grant():
    builder = account_grant_builder()
    assert (
        str(builder.grant("MONITOR USAGE", "ANALYST"))
        == 'GRANT MONITOR USAGE ON ACCOUNT TO ROLE "ANALYST"'
    )
    assert (
        str(builder.grant("CREATE ROLE", "ops", with_grant_option=True))
        == 'GRANT CREATE ROLE ON ACCOUNT TO ROLE "ops" WITH GRANT OPTION'
    )


def test_revoke():
    assert (
        str(account_grant_builder().revoke("MANAGE GRANTS", "ANALYST"))
        == 'REVOKE MANAGE GRANTS ON ACCOUNT FROM ROLE "ANALYST"'
    )


def test_quote_identifier():
    assert quote_identifier("plain") == '"plain"'
    assert quote_identifier('we"ird') == '"we""ird"'


def test_execute_passes_sql_text():
    executor = MagicMock()
    account_grant_builder().show().execute(executor)
    executor.execute.assert_called_once_with("SHOW GRANTS ON ACCOUNT")
