"""Loading of the application configuration from a TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import MISSING, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable

__all__ = [
    "ConfError",
    "DBConf",
    "RedisConf",
    "SessionsConf",
    "EmailConf",
    "Conf",
    "parse_conf",
]

_U32_MAX = 2**32 - 1


class ConfError(Exception):
    """Raised when the configuration cannot be read or is invalid."""


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(f"expected a string, got {type(value).__name__}")


def _port(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected an integer, got a boolean")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            raise TypeError(f"expected an integer, got {value!r}")
        value = int(stripped)
    if not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"{value} is out of range")
    return value


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise TypeError(f"expected a boolean, got {value!r}")


def _conv(converter: Callable[[Any], Any], **kwargs: Any) -> Any:
    return field(metadata={"convert": converter}, **kwargs)


@dataclass(frozen=True)
class DBConf:
    """Connection settings of the PostgreSQL database."""

    user: str = _conv(_text)
    dbname: str = _conv(_text)
    host: str = _conv(_text)
    port: int | None = _conv(_port, default=None)
    password: str | None = _conv(_text, default=None)


@dataclass(frozen=True)
class RedisConf:
    """Connection settings of the Redis session store."""

    host: str = _conv(_text)
    port: int | None = _conv(_port, default=None)
    password: str | None = _conv(_text, default=None)


@dataclass(frozen=True)
class SessionsConf:
    """Settings of the session cookies."""

    cookie_secret: str = _conv(_text)
    cookie_secure: bool = _conv(_flag)


@dataclass(frozen=True)
class EmailConf:
    """Settings of the e-mail delivery service."""

    api_key: str = _conv(_text)


def _build(cls: type, raw: Any, where: str, strict: bool) -> Any:
    if not isinstance(raw, dict):
        raise ConfError(f"Error while loading db conf: [{where}] must be a table")
    known = {f.name for f in fields(cls)}
    if strict:
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfError(
                f"Error while loading db conf: unknown field `{unknown[0]}` in [{where}]"
            )
    kwargs = {}
    for f in fields(cls):
        if f.name not in raw:
            if f.default is MISSING:
                raise ConfError(
                    f"Error while loading db conf: missing field `{f.name}` in [{where}]"
                )
            continue
        try:
            kwargs[f.name] = f.metadata["convert"](raw[f.name])
        except (TypeError, ValueError) as exc:
            raise ConfError(
                f"Error while loading db conf: invalid `{f.name}` in [{where}]: {exc}"
            ) from exc
    return cls(**kwargs)


def _section(cls: type) -> Callable[[Any], Any]:
    return lambda raw: raw if isinstance(raw, cls) else None


@dataclass(frozen=True)
class Conf:
    """Whole application configuration."""

    database: DBConf
    redis: RedisConf
    sessions: SessionsConf
    email: EmailConf


_SECTIONS: dict[str, type] = {
    "database": DBConf,
    "redis": RedisConf,
    "sessions": SessionsConf,
    "email": EmailConf,
}


def parse_conf(conf_path: str | Path) -> Conf:
    """Read and validate the TOML configuration file at ``conf_path``."""
    path = Path(conf_path)
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfError(f"no such file: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfError(f"invalid configuration file {path}: {exc}") from exc

    sections = {}
    for name, cls in _SECTIONS.items():
        if name not in data:
            raise ConfError(f"Error while loading db conf: missing section [{name}]")
        sections[name] = _build(cls, data[name], name, strict=True)
    return Conf(**sections)