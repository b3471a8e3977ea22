import logging
import os
import re
import tempfile
from typing import Optional

from models.exceptions import StorageException
from registry.names import logical_name
from registry.render import CLIENT_MARKER, render_peer_block

log = logging.getLogger(__name__)

# The stanza of a client block: every following non-blank line, up to the next blank line or the next marker.
_STANZA = r"(?:^(?!" + re.escape(CLIENT_MARKER) + r")[^\n]*\S[^\n]*(?:\n|\Z))*"
_ALL_BLOCKS = re.compile(r"(?:^\n)?^" + re.escape(CLIENT_MARKER) + r"[^\n]*(?:\n|\Z)" + _STANZA, re.MULTILINE)
_MARKER_NAMES = re.compile(r"^" + re.escape(CLIENT_MARKER) + r"(\S+)[ \t]*$", re.MULTILINE)


def _marker_regex(identifier: str) -> str:
    return r"^" + re.escape(CLIENT_MARKER + identifier) + r"[ \t]*$"


def _block_regex(identifier: str) -> re.Pattern:
    """
    Match one client block together with the single blank line in front of it, which is the separator written
    when the block was appended.
    """
    return re.compile(r"(?:^\n)?" + _marker_regex(identifier) + r"\n?" + _STANZA, re.MULTILINE)


class ServerConfigFile:
    """
    The wireguard server config file (e.g. /etc/wireguard/wg0.conf) is the authoritative list of clients.  Every
    client is a `### Client <name>` marker line followed by a [Peer] stanza.  The file is edited textually so that
    everything which is not a client block, including the [Interface] section, is left exactly as it was.
    """

    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def read(self) -> str:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as ex:
            raise StorageException(f"Failed to read WireGuard config: {ex}")

    def _write(self, text: str) -> None:
        """Replace the file atomically so a failed write never leaves a truncated config behind."""
        directory, base_name = os.path.split(os.path.abspath(self._path))
        try:
            temp_fd, temp_path = tempfile.mkstemp(dir=directory, prefix=f".{base_name}.", suffix=".tmp")
        except OSError as ex:
            raise StorageException(f"Failed to update server config: {ex}")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as tmp:
                tmp.write(text)
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self._path)
        except OSError as ex:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise StorageException(f"Failed to update server config: {ex}")

    def has_client(self, identifiers: list[str], text: Optional[str] = None) -> bool:
        """Return true if a marker exists for any of the given identifiers."""
        if text is None:
            text = self.read()
        return any(re.search(_marker_regex(identifier), text, re.MULTILINE) for identifier in identifiers)

    def client_names(self, wg_interface: str, text: Optional[str] = None) -> list[str]:
        """Return the logical names of all the clients that have a block in the file."""
        if text is None:
            text = self.read()
        names = []
        for identifier in _MARKER_NAMES.findall(text):
            name = logical_name(identifier, wg_interface)
            if name is not None and name not in names:
                names.append(name)
        return names

    def append_client(self, name: str, public_key: str, preshared_key: str, ipv4: str, ipv6: Optional[str]) -> None:
        text = self.read()
        separator = "\n" if not text or text.endswith("\n") else "\n\n"
        block = render_peer_block(name, public_key, preshared_key, ipv4, ipv6)
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(separator + block)
        except OSError as ex:
            raise StorageException(f"Failed to update server config: {ex}")

    def remove_client(self, identifiers: list[str]) -> int:
        """
        Remove the blocks of every given identifier.  Returns the number of blocks removed.  If nothing matches the
        file is not rewritten.
        """
        text = self.read()
        removed = 0
        for identifier in identifiers:
            text, count = _block_regex(identifier).subn("", text)
            removed += count
        if removed:
            self._write(text)
        return removed

    def remove_all_clients(self) -> int:
        text, removed = _ALL_BLOCKS.subn("", self.read())
        if removed:
            self._write(text)
        return removed
