import logging
import re
import subprocess
import time

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0  # seconds between caching credentials, starting mstsc and deleting credentials


def credential_target(host: str) -> str:
    return f"TERMSRV/{host}"


def cmdkey_add_command(*, host: str, username: str, password: str) -> str:
    return f"cmdkey /generic:{credential_target(host)} /user:{username} /pass:{password}"


def cmdkey_delete_command(*, host: str) -> str:
    return f"cmdkey /delete:{credential_target(host)}"


def mstsc_command(*, host: str, fullscreen: bool = True) -> str:
    return f"start mstsc /f /v:{host}" if fullscreen else f"start mstsc /v:{host}"


def redact(command: str) -> str:
    """Hide the value of a `/pass:` argument in `command`."""
    return re.sub(r"(/pass:).*", r"\1****", command)


def run_command(command: str, *, check: bool) -> bool:
    """
    Run `command` through `cmd /c` and wait for it to finish.

    Args:
        command: The command line to run.
        check: If True, raise on failure. If False, log the failure as a warning and return False.

    Returns:
        True if the command ran and exited with status 0.
    """

    logger.debug(f"Running command {redact(command)!r}")

    try:
        subprocess.run(["cmd", "/c", command], check=True, capture_output=True)

    except subprocess.CalledProcessError as e:
        if check:
            raise
        logger.warning(f"Command {redact(command)!r} failed with exit status {e.returncode}")
        return False

    except OSError as e:
        if check:
            raise
        logger.warning(f"Command {redact(command)!r} failed: {e}")
        return False

    return True


def start_windows_rdp(
    *,
    host: str,
    username: str,
    password: str,
    fullscreen: bool = True,
    delay: float = DEFAULT_DELAY,
):
    """
    Start a Windows Remote Desktop Protocol (RDP) session to a remote machine `host` with a given
    `username` and `password` using the `mstsc` command-line tool. Use `cmdkey` to cache credentials
    for `TERMSRV/{host}`, which are deleted again once `mstsc` has had `delay` seconds to read them.

    Every step is best-effort: failures are logged as warnings and the next step still runs. The cached
    credential is deleted even if `mstsc` could not be started or the wait is interrupted.

    Args:
        host: The hostname or IP address of the remote machine.
        username: The `DOMAIN\\user` login to use for the connection.
        password: The password for the user.
        fullscreen: Whether to start the RDP session in fullscreen mode. Defaults to True.
        delay: Seconds to wait after caching credentials and after starting `mstsc`. Defaults to 2.
    """

    # store credentials in Windows Credential Manager (temporary)
    run_command(cmdkey_add_command(host=host, username=username, password=password), check=False)

    try:
        time.sleep(delay)

        # start RDP session, the client reads the cached credentials on startup
        run_command(mstsc_command(host=host, fullscreen=fullscreen), check=False)
        time.sleep(delay)

    finally:
        # clear the credentials again
        run_command(cmdkey_delete_command(host=host), check=False)
