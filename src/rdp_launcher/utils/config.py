import enum
import getpass
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_ENV_VAR = "RDP_LAUNCHER_CONFIG"
DEFAULT_CONFIG_FILES = ("config.yaml", "config.yml", "config.json")

# sentinel strings used in the config file
OPERATOR_SENTINEL = "USERNAME"
NO_PASSWORD_SENTINEL = "NA"


class ConfigError(Exception):
    """Raised when the launcher configuration cannot be read or decoded."""


class Operator(enum.Enum):
    CURRENT = OPERATOR_SENTINEL


CURRENT_OPERATOR = Operator.CURRENT


class Host(BaseModel):

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    name: str = Field(alias="Name", min_length=1)
    type: str = Field(alias="Type", min_length=1)
    address: str = Field(alias="Address", min_length=1)


class UserEntry(BaseModel):

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    domain: str = Field(alias="Domain")
    username: Operator | str = Field(alias="Username")
    password: str | None = Field(alias="Password", default=None)

    @field_validator("username", mode="before")
    @classmethod
    def _decode_operator(cls, value: Any) -> Any:
        return CURRENT_OPERATOR if value == OPERATOR_SENTINEL else value

    @field_validator("password", mode="before")
    @classmethod
    def _decode_password(cls, value: Any) -> Any:
        return None if value in (NO_PASSWORD_SENTINEL, "") else value


class LauncherConfig(BaseModel):

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    hosts: list[Host] = Field(alias="host", min_length=1)
    users: list[UserEntry] = Field(alias="user")


def current_operator() -> str:
    """Name of the local account running the launcher."""
    return getpass.getuser()


def format_login(user: UserEntry, *, operator: str) -> str:
    r"""
    Build the `Domain\Username` login for `user`, using `operator` in place of `CURRENT_OPERATOR`.

    The same function is used to build the list of choices and to look up the password after
    a choice is made, so both always agree for a given `operator`.
    """

    username = operator if user.username is CURRENT_OPERATOR else user.username
    return f"{user.domain}\\{username}"


def find_config_file(filepath: Path | str | None = None) -> Path:
    """Find the config file from `filepath`, the `RDP_LAUNCHER_CONFIG` env var or the working directory."""

    if filepath:
        return Path(filepath)

    # load environment variables from a .env file in the working directory
    load_dotenv(dotenv_path=Path(".env"), override=False)

    if env_path := os.getenv(CONFIG_ENV_VAR):
        return Path(env_path)

    for name in DEFAULT_CONFIG_FILES:
        if (path := Path(name)).is_file():
            return path

    raise ConfigError(f"No config file found, looked for {', '.join(DEFAULT_CONFIG_FILES)} in {Path.cwd().as_posix()!r}")


def load_config(filepath: Path | str | None = None) -> LauncherConfig:
    """
    Read and decode the launcher config file.

    Args:
        filepath: Path to a YAML (or JSON) file. If not given, see `find_config_file`.

    Raises:
        ConfigError: If the file is missing, unreadable or does not have the expected shape.
    """

    path = find_config_file(filepath)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error reading config file {path.as_posix()!r}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path.as_posix()!r} must contain a mapping with 'host' and 'user' keys")

    try:
        return LauncherConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path.as_posix()!r}: {e}") from e
