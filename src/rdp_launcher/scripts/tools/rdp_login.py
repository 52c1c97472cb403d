import logging
import sys
from typing import Sequence, TextIO

import argh
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rdp_launcher.utils.config import ConfigError, Host, UserEntry, current_operator, format_login, load_config
from rdp_launcher.utils.log import DEFAULT_LOGFILE, LOG_LEVELS, configure_logging
from rdp_launcher.utils.prompts import PromptCancelledError, SelectPrompt, ask_password
from rdp_launcher.utils.rdp import DEFAULT_DELAY, start_windows_rdp

APP_NAME = "rdp_login"

logger = logging.getLogger(f"rdp_launcher.{APP_NAME}")


def host_details(host: Host) -> Table:

    table = Table(title="Host", show_header=False, box=None, title_justify="left")
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Name:", escape(host.name))
    table.add_row("Type:", escape(host.type))
    table.add_row("Address:", escape(host.address))

    return table


def select_host(
    hosts: Sequence[Host],
    *,
    console: Console | None = None,
    stream: TextIO | None = None,
) -> str:
    """
    Let the operator pick one of `hosts` and return its address.

    The list can be searched by name, ignoring case and spaces.

    Raises:
        PromptCancelledError: If the prompt is cancelled.
    """

    def searcher(query: str, index: int) -> bool:
        name = hosts[index].name.lower().replace(" ", "")
        return query.lower().replace(" ", "") in name

    prompt = SelectPrompt(
        label="Host",
        items=hosts,
        active=lambda h: f"[cyan underline]{escape(h.name)}[/cyan underline] ([green]{escape(h.address)}[/green])",
        inactive=lambda h: f"[cyan]{escape(h.name)}[/cyan] ([green]{escape(h.address)}[/green])",
        selected=lambda h: f"[green]✔[/green] [bold]{escape(h.name)}[/bold]",
        details=host_details,
        searcher=searcher,
        size=4,
        console=console,
        stream=stream,
    )

    index, _ = prompt.run()
    address = hosts[index].address
    logger.debug(f"Selected host {address=!r}")

    return address


def select_user(
    users: Sequence[UserEntry],
    *,
    operator: str | None = None,
    console: Console | None = None,
    stream: TextIO | None = None,
) -> tuple[str, str]:
    """
    Let the operator pick one of `users` or type a new login.

    Args:
        users: The configured users.
        operator: Account name used for users configured as the current operator. Defaults to the
            account running this program.

    Returns:
        The chosen login and the password stored for it, or "" if none is stored.

    Raises:
        PromptCancelledError: If the prompt is cancelled.
    """

    operator = operator or current_operator()
    logins = [format_login(user, operator=operator) for user in users]

    prompt = SelectPrompt(
        label="User",
        items=logins,
        add_label="Other",
        console=console,
        stream=stream,
    )

    _, login = prompt.run()

    # look up the password of the first user with a matching login
    password = next(
        (user.password or "" for user in users if format_login(user, operator=operator) == login),
        "",
    )
    logger.debug(f"Selected user {login=!r} (stored password: {bool(password)})")

    return login, password


def resolve_password(existing: str | None, *, console: Console | None = None) -> str:
    """
    Return `existing` if it is non-empty, otherwise ask the operator for a password.

    Raises:
        PromptCancelledError: If the password prompt is cancelled.
    """

    if existing:
        return existing

    return ask_password(console=console)


@argh.arg("--out", help="log output mode", choices=["stdout", "stderr", "file"])
@argh.arg("--logfile", help="log output filename")
@argh.arg("--level", help="log level", choices=list(LOG_LEVELS))
@argh.arg("--config", help="path to the YAML config file with hosts and users")
@argh.arg("--password-cancel-exit-code", help="exit status when the password prompt is cancelled", type=int)
@argh.arg("--delay", help="seconds to wait after caching credentials and after starting mstsc")
def rdp_login(
    *,
    out: str = "file",
    logfile: str = DEFAULT_LOGFILE,
    level: str = "info",
    config: str | None = None,
    password_cancel_exit_code: int = 0,
    delay: float = DEFAULT_DELAY,
) -> None:
    """Pick a host and user, then open a fullscreen Remote Desktop session with cached credentials."""

    try:
        configure_logging(out=out, logfile=logfile, level=level)
    except (OSError, ValueError) as e:
        print(f"Failed to set up logging: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        launcher_config = load_config(config)
    except ConfigError as e:
        logger.critical(str(e))
        if out != "stderr":
            print(e, file=sys.stderr)
        sys.exit(1)

    logger.info(f"Start {APP_NAME} app")
    console = Console()

    try:
        address = select_host(launcher_config.hosts, console=console)
        login, password = select_user(launcher_config.users, console=console)
    except PromptCancelledError as e:
        logger.error(f"Prompt failed, {e}")
        sys.exit(1)

    try:
        password = resolve_password(password, console=console)
    except PromptCancelledError as e:
        logger.error(f"Prompt failed, {e}")
        sys.exit(password_cancel_exit_code)

    start_windows_rdp(host=address, username=login, password=password, delay=delay)

    logger.info(f"End {APP_NAME} app")


def main():
    """Main entry point for the RDP Login application."""
    argh.dispatch_command(rdp_login, old_name_mapping_policy=False)


if __name__ == "__main__":
    main()
