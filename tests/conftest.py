"""
Pytest configuration and shared fixtures.

This module contains fixtures shared across the test modules: sample hosts and
users, a config file writer, a console that records its output and a helper
that feeds scripted answers to the interactive prompts.
"""

import io
import logging
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from rdp_launcher.utils import prompts
from rdp_launcher.utils.config import CONFIG_ENV_VAR, Host, UserEntry
from rdp_launcher.utils.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test from an empty working directory without a config env var."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_logger():
    """Remove handlers added by `configure_logging` after each test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def config_data() -> dict:
    """
    Provide raw config data as it would be read from YAML.

    Returns
    -------
    dict
        Mapping with one host and two users
    """
    return {
        "host": [
            {"Name": "srv1", "Type": "rdp", "Address": "10.0.0.5"},
        ],
        "user": [
            {"Domain": "CORP", "Username": "alice", "Password": "s3cret!"},
            {"Domain": "CORP", "Username": "USERNAME", "Password": "NA"},
        ],
    }


@pytest.fixture
def write_config(tmp_path):
    """Return a function writing a config mapping to a YAML file and returning its path."""

    def _write(data, name: str = "config.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def hosts() -> list[Host]:
    return [
        Host(name="Web Server", type="rdp", address="10.0.0.1"),
        Host(name="Database", type="rdp", address="10.0.0.2"),
        Host(name="Backup", type="rdp", address="10.0.0.3"),
        Host(name="Build Agent", type="rdp", address="10.0.0.4"),
        Host(name="Jump Host", type="rdp", address="10.0.0.5"),
    ]


@pytest.fixture
def users() -> list[UserEntry]:
    return [
        UserEntry(domain="CORP", username="alice", password="s3cret!"),
        UserEntry(domain="CORP", username="USERNAME", password="NA"),
        UserEntry(domain="LAB", username="svc_rdp"),
    ]


@pytest.fixture
def console() -> Console:
    """Console writing plain text to an in-memory file."""
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)


@pytest.fixture
def scripted_input(monkeypatch):
    """
    Replace `read_line` so prompts receive the given answers in order.

    Once the answers run out, further reads behave like a closed input stream.
    """

    answers: list[str] = []

    def fake_read_line(console, prompt, *, stream=None):
        if not answers:
            raise prompts.PromptCancelledError("Input stream closed")
        return answers.pop(0)

    monkeypatch.setattr(prompts, "read_line", fake_read_line)

    def _feed(*lines: str) -> list[str]:
        answers.extend(lines)
        return answers

    return _feed
