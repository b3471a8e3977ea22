from __future__ import annotations
import logging
import subprocess
from typing import Optional

from models.exceptions import ExternalToolException
from server_manager import DEFAULT_COMMAND_TIMEOUT
from server_manager.interface import AbstractDaemonSync, AbstractKeyGenerator


log = logging.getLogger(__name__)


def run_command(cmd: list[str], timeout: float, stdin: Optional[str] = None) -> tuple[bool, str]:
    """
    Locally execute a command
    :return
    If successful, (True, the stdout).
    If unsuccessful, (False, a message built from the stderr).
    """
    log.debug("Running command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(cmd, input=stdin, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return False, f"'{' '.join(cmd)}' timed out after {timeout} seconds"
    except OSError as ex:
        return False, f"'{' '.join(cmd)}' could not be executed: {ex}"

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        return False, f"'{' '.join(cmd)}' exited with status {completed.returncode}: {stderr}"
    return True, completed.stdout or ""


class WgKeyGenerator(AbstractKeyGenerator):
    """Generate key material with the wg command line tool."""

    def __init__(self, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self._timeout = timeout

    def _single_line(self, cmd: list[str], stdin: Optional[str] = None) -> str:
        success, result = run_command(cmd, self._timeout, stdin=stdin)
        if not success:
            raise ExternalToolException(f"Failed to generate key: {result}")
        key = result.strip()
        if not key:
            raise ExternalToolException(f"Failed to generate key: '{' '.join(cmd)}' produced no output")
        return key

    def generate_private_key(self) -> str:
        return self._single_line(["wg", "genkey"])

    def derive_public_key(self, private_key: str) -> str:
        return self._single_line(["wg", "pubkey"], stdin=private_key)

    def generate_preshared_key(self) -> str:
        return self._single_line(["wg", "genpsk"])


class WgQuickDaemonSync(AbstractDaemonSync):
    """Push the config file into the running daemon with wg-quick strip and wg syncconf."""

    def __init__(self, timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self._timeout = timeout

    def sync_interface(self, wg_interface: str) -> None:
        success, stripped = run_command(["wg-quick", "strip", wg_interface], self._timeout)
        if not success:
            raise ExternalToolException(f"wg-quick strip command failed: {stripped}")

        success, result = run_command(["wg", "syncconf", wg_interface, "/dev/stdin"], self._timeout, stdin=stripped)
        if not success:
            raise ExternalToolException(f"wg syncconf command failed: {result}")
        log.debug("Synchronized wireguard interface %s", wg_interface)
