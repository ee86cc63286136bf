from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping, Protocol, runtime_checkable
import json

import platformdirs
import pydantic
import pydantic.dataclasses
import toml
import yaml

from grantsync.database import DEFAULT_DRIVER, Database, connect, typeadapter
from grantsync.errors import ConfigError

APP_NAME = "grantsync"

type Format = Literal["toml", "json", "yaml"]
SUFFIXES: dict[str, Format] = {
    "toml": "toml",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
}


def dump_str(value: Any, format: Format) -> str:
    match format:
        case "toml":
            return toml.dumps(value)
        case "json":
            return json.dumps(value, indent=2, sort_keys=True)
        case "yaml":
            return yaml.safe_dump(value, sort_keys=True)
    raise ValueError(f"Unsupported format: {format}.")


def load_str(text: str, format: Format) -> dict:
    try:
        match format:
            case "toml":
                data = toml.loads(text)
            case "json":
                data = json.loads(text)
            case "yaml":
                data = yaml.safe_load(text)
            case _:
                raise ValueError(f"Unsupported format: {format}.")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse {format}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a {format} table at the top level.")
    return data


def format_for(path: Path, format: Format | None = None) -> Format:
    if format is not None:
        return format
    try:
        return SUFFIXES[path.suffix.lstrip(".").lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown extension {path}, pass the format as an argument."
        ) from None


def load_path(path: Path, format: Format | None = None) -> dict:
    if not path.exists():
        return {}
    elif path.is_dir():
        raise ConfigError(f"Expected a file not a directory: {path}")
    return load_str(path.read_text(), format_for(path, format))


def dump_path(value: Any, path: Path, format: Format | None = None) -> None:
    text = dump_str(value, format_for(path, format))
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(text)
    tmp.replace(path)


@runtime_checkable
class SourceType(Protocol):
    def load(self) -> Mapping[str, Any]: ...


@dataclass
class StrSource:
    data: str
    format: Format = "toml"

    def load(self) -> dict:
        return load_str(self.data, self.format)


@dataclass
class MappingSource:
    data: Mapping

    def load(self) -> Mapping:
        return self.data


@dataclass
class PathSource:
    path: Path
    format: Format | None = None

    def load(self) -> dict:
        if not self.path.exists():
            raise ConfigError(f"Config file not found: {self.path}")
        return load_path(self.path, self.format)


@dataclass
class PlatformdirsSource:
    name: str = APP_NAME

    @property
    def configpath(self) -> Path:
        return self.configdir / "config.toml"

    @property
    def configdir(self) -> Path:
        return Path(platformdirs.user_config_dir(self.name)).resolve()

    @property
    def datadir(self) -> Path:
        return Path(platformdirs.user_data_dir(self.name)).resolve()

    def load(self) -> dict:
        return load_path(self.configpath)


def default_state_path() -> Path:
    return PlatformdirsSource().datadir / "state.json"


@pydantic.dataclasses.dataclass
class ConnectionSettings:
    driver: str = DEFAULT_DRIVER
    params: dict[str, Any] = field(default_factory=dict)
    echo: bool = False
    autocommit: bool = True


@pydantic.dataclasses.dataclass
class Settings:
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    state_path: Path = field(default_factory=default_state_path)
    grants: dict[str, dict[str, Any]] = field(default_factory=dict)

    def database(self) -> Database:
        return connect(
            self.connection.driver,
            self.connection.echo,
            self.connection.autocommit,
            **self.connection.params,
        )


def parse_python[M](obj: Any, model: type[M]) -> M:
    try:
        return typeadapter(model).validate_python(obj)
    except pydantic.ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_settings(source: SourceType) -> Settings:
    """Validate ``source`` into ``Settings``.

    A relative ``state_path`` in a config file is taken relative to the
    file's directory.
    """
    settings = parse_python(dict(source.load()), Settings)
    if isinstance(source, PathSource) and not settings.state_path.is_absolute():
        settings.state_path = source.path.parent / settings.state_path
    return settings


def load(
    *,
    path: Path | None = None,
    text: str | None = None,
    mapping: Mapping | None = None,
    format: Format | None = None,
) -> Settings:
    src: SourceType
    if path is not None:
        src = PathSource(path, format)
    elif text is not None:
        src = StrSource(text, format or "toml")
    elif mapping is not None:
        src = MappingSource(mapping)
    else:
        src = PlatformdirsSource()
    return load_settings(src)
