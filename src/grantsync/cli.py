from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grantsync import config as _config, driver
from grantsync.errors import GrantError
from grantsync.identifier import GrantIdentifier, encode_grant_id
from grantsync.logs import configure_logging
from grantsync.records import GrantRecord
from grantsync.resource import GrantConfig, GrantResource, account_grant
from grantsync.state import StateStore

cli = typer.Typer(no_args_is_help=True, help="Converge account grants onto a config.")
console = Console()

ConfigArg = Annotated[
    Optional[Path], typer.Argument(help="Config file, defaults to the user config.")
]
StateOpt = Annotated[
    Optional[Path], typer.Option("--state", help="State file, overrides the config.")
]


@contextmanager
def reported() -> Iterator[None]:
    try:
        yield
    except GrantError as exc:
        console.print("[red]error:[/red]", escape(str(exc)))
        raise typer.Exit(1) from exc


def open_settings(path: Path | None) -> _config.Settings:
    return _config.load(path=path)


def declared_grants(
    settings: _config.Settings, resource: GrantResource
) -> dict[str, GrantConfig]:
    return {
        name: resource.parse_config(data) for name, data in settings.grants.items()
    }


def print_changes(changes: list[driver.Change], dry_run: bool) -> None:
    table = Table(title="planned changes" if dry_run else "changes")
    table.add_column("grant")
    table.add_column("action")
    table.add_column("grant to")
    table.add_column("revoke from")
    for change in changes:
        table.add_row(
            change.name,
            change.action,
            ", ".join(sorted(change.diff.to_add)),
            ", ".join(sorted(change.diff.to_revoke)),
        )
    console.print(table)


@cli.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    configure_logging(verbose)


@cli.command()
def apply(
    config: ConfigArg = None,
    state: StateOpt = None,
    dry_run: Annotated[bool, typer.Option("--dry-run")] = False,
) -> None:
    """Grant and revoke until the account matches the config."""
    with reported():
        settings = open_settings(config)
        resource = account_grant()
        grants = declared_grants(settings, resource)
        store = StateStore.open(state or settings.state_path)
        with settings.database() as db:
            changes = driver.apply(db, resource, grants, store, dry_run=dry_run)
    print_changes(changes, dry_run)


@cli.command()
def destroy(
    config: ConfigArg = None,
    state: StateOpt = None,
    dry_run: Annotated[bool, typer.Option("--dry-run")] = False,
) -> None:
    """Revoke every grant recorded in the state file."""
    with reported():
        settings = open_settings(config)
        store = StateStore.open(state or settings.state_path)
        with settings.database() as db:
            changes = driver.destroy(db, account_grant(), store, dry_run=dry_run)
    print_changes(changes, dry_run)


@cli.command("import")
def import_grant(
    name: str,
    grant_id: str,
    config: ConfigArg = None,
    state: StateOpt = None,
) -> None:
    """Adopt an existing grant under NAME."""
    with reported():
        settings = open_settings(config)
        resource = account_grant()
        declared = settings.grants.get(name)
        roles = resource.parse_config(declared).roles if declared else frozenset()
        store = StateStore.open(state or settings.state_path)
        with settings.database() as db:
            imported = resource.read(db, resource.import_state(grant_id, roles))
        store.put(name, imported)
        store.save()
    typer.echo(f"imported {name}: {', '.join(sorted(imported.roles)) or '-'}")


@cli.command()
def show(config: ConfigArg = None) -> None:
    """List the grants currently held on the account."""
    with reported():
        settings = open_settings(config)
        resource = account_grant()
        with settings.database() as db:
            records = db.query(resource.builder.show(), GrantRecord)
    table = Table(title=f"grants on {resource.resource_name}")
    for column in ("privilege", "grantee", "grant option", "granted by", "created"):
        table.add_column(column)
    for record in sorted(records, key=lambda r: (r.privilege, r.grantee_name)):
        table.add_row(
            record.privilege,
            record.grantee_name,
            "yes" if record.grant_option else "no",
            record.granted_by or "",
            record.created_on.strftime("%Y-%m-%d") if record.created_on else "",
        )
    console.print(table)


@cli.command()
def encode_id(
    resource_name: str,
    privilege: str,
    grant_option: Annotated[bool, typer.Option("--grant-option")] = False,
) -> None:
    """Print the grant id for RESOURCE_NAME and PRIVILEGE."""
    with reported():
        typer.echo(encode_grant_id(resource_name, privilege, grant_option))


@cli.command()
def decode_id(grant_id: str) -> None:
    """Print the fields packed into GRANT_ID."""
    with reported():
        identifier = GrantIdentifier.parse(grant_id)
    typer.echo(f"resource_name: {identifier.resource_name}")
    typer.echo(f"privilege: {identifier.privilege}")
    typer.echo(f"grant_option: {str(identifier.grant_option).lower()}")


if __name__ == "__main__":
    cli()
