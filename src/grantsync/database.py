from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Protocol, Self
from contextlib import contextmanager
import importlib
import logging

import pydantic

from grantsync.errors import ConfigError, ExternalOperationError
from grantsync.statements import Statement

log = logging.getLogger(__name__)

DEFAULT_DRIVER = "sqlite3:connect"


class CursorType(Protocol):
    description: Any

    def execute(self, sql: str, *args: Any) -> Any: ...
    def fetchall(self) -> list[Any]: ...
    def close(self) -> None: ...


class ConnectionType(Protocol):
    def cursor(self) -> CursorType: ...
    def commit(self) -> None: ...
    def close(self) -> None: ...


type ConnectorType = Callable[..., ConnectionType]


TYPEADAPTER_CACHE: dict[type, pydantic.TypeAdapter] = {}


def typeadapter[M](model: type[M]) -> pydantic.TypeAdapter[M]:
    try:
        return TYPEADAPTER_CACHE[model]
    except KeyError:
        TYPEADAPTER_CACHE[model] = adapter = pydantic.TypeAdapter(model)
        return adapter


def column_names(description: Any) -> list[str]:
    return [column[0].lower() for column in description or ()]


def validate_row[M](row: Any, columns: list[str], model: type[M]) -> M:
    match row:
        case dict():
            obj = {str(k).lower(): v for k, v in row.items()}
        case _:
            obj = dict(zip(columns, row))
    return typeadapter(model).validate_python(obj)


def load_connector(driver: str = DEFAULT_DRIVER) -> ConnectorType:
    """Resolve a DB-API ``connect`` callable from ``"module:attribute"``."""
    module_name, _, attr = driver.partition(":")
    if not module_name or not attr:
        raise ConfigError(f"Driver must look like 'module:attribute', got {driver!r}.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import driver module {module_name!r}.") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigError(f"Driver module {module_name!r} has no {attr!r}.") from exc


@dataclass
class Database:
    """Lazily connected wrapper around a DB-API 2.0 connection.

    Every driver failure surfaces as ``ExternalOperationError`` chained to
    the original exception.
    """

    connector: ConnectorType
    params: dict[str, Any] = field(default_factory=dict)
    echo: bool = False
    autocommit: bool = True

    connection: ConnectionType | None = None

    def connect(self) -> ConnectionType:
        if self.connection is None:
            try:
                self.connection = self.connector(**self.params)
            except Exception as exc:
                raise ExternalOperationError(f"Cannot connect: {exc}") from exc
        return self.connection

    def close(self) -> None:
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, exc, exc_type, exc_tb) -> None:
        self.close()

    @contextmanager
    def cursor(self, sql: str) -> Iterator[CursorType]:
        connection = self.connect()
        try:
            cursor = connection.cursor()
        except Exception as exc:
            raise ExternalOperationError(
                f"Cannot open cursor: {exc}", sql=sql
            ) from exc
        try:
            if self.echo:
                log.info("%s", sql)
            cursor.execute(sql)
            yield cursor
        except ExternalOperationError:
            raise
        except Exception as exc:
            raise ExternalOperationError(f"{exc}", sql=sql) from exc
        finally:
            cursor.close()

    def execute(self, sql: str | Statement) -> None:
        with self.cursor(str(sql)):
            pass
        if self.autocommit:
            self.commit()

    def commit(self) -> None:
        if self.connection is None:
            return
        try:
            self.connection.commit()
        except Exception as exc:
            raise ExternalOperationError(f"Cannot commit: {exc}") from exc

    def query[M](self, sql: str | Statement, model: type[M]) -> list[M]:
        with self.cursor(str(sql)) as cursor:
            columns = column_names(cursor.description)
            rows = cursor.fetchall()
        try:
            return [validate_row(row, columns, model) for row in rows]
        except pydantic.ValidationError as exc:
            raise ExternalOperationError(
                f"Unexpected row shape: {exc}", sql=str(sql)
            ) from exc


def connect(
    driver: str = DEFAULT_DRIVER,
    echo: bool = False,
    autocommit: bool = True,
    **params: Any,
) -> Database:
    return Database(load_connector(driver), params, echo, autocommit)
