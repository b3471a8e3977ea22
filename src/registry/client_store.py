import errno
import logging
import os
import re
from typing import Iterable, Optional

from models.clients import ClientRecordModel
from models.exceptions import ConflictException, StorageException
from registry.names import CLIENT_FILE_SUFFIX, candidate_file_names, canonical_file_name, logical_name

log = logging.getLogger(__name__)

_INTERFACE_SECTION = re.compile(r"^\[Interface\][ \t]*$", re.MULTILINE)
_ADDRESS_LINE = re.compile(r"^Address[ \t]*=[ \t]*(.*)$", re.MULTILINE)


def extract_addresses(body: str) -> tuple[Optional[str], Optional[str]]:
    """
    Best effort scan of a bundle for the client addresses: the first and second comma separated entries of the
    Address line in the [Interface] section, without their prefix length.
    """
    section = _INTERFACE_SECTION.search(body)
    if section is None:
        return None, None
    address = _ADDRESS_LINE.search(body, section.end())
    if address is None:
        return None, None
    tokens = [token.strip().split("/")[0] for token in address.group(1).split(",")]
    ipv4 = tokens[0] if len(tokens) > 0 and tokens[0] else None
    ipv6 = tokens[1] if len(tokens) > 1 and tokens[1] else None
    return ipv4, ipv6


class ClientFileStore:
    """The directory of client bundles, i.e. the config files handed to the end users."""

    def __init__(self, directory: str, wg_interface: str, excluded_paths: Iterable[str] = ()):
        """
        :param excluded_paths: Files that may live in the directory but are never client bundles, such as the
        server config file when the clients directory is /etc/wireguard.
        """
        self._directory = directory
        self._wg_interface = wg_interface
        self._excluded = {os.path.realpath(path) for path in excluded_paths}

    @property
    def directory(self) -> str:
        return self._directory

    def _path(self, file_name: str) -> str:
        return os.path.join(self._directory, file_name)

    def _is_excluded(self, file_name: str) -> bool:
        return os.path.realpath(self._path(file_name)) in self._excluded

    def _candidates(self, name: str) -> list[str]:
        return [
            file_name
            for file_name in candidate_file_names(name, self._wg_interface)
            if not self._is_excluded(file_name)
        ]

    def _bundle_files(self) -> list[str]:
        """Return the recognized bundle file names, sorted."""
        try:
            entries = sorted(os.listdir(self._directory))
        except FileNotFoundError:
            return []
        except OSError as ex:
            raise StorageException(f"Failed to list clients directory: {ex}")
        return [
            entry
            for entry in entries
            if entry.endswith(CLIENT_FILE_SUFFIX)
            and logical_name(entry, self._wg_interface) is not None
            and os.path.isfile(self._path(entry))
            and not self._is_excluded(entry)
        ]

    def _read_file(self, file_name: str) -> str:
        with open(self._path(file_name), "r", encoding="utf-8") as f:
            return f.read()

    def list_clients(self) -> list[ClientRecordModel]:
        clients: dict[str, ClientRecordModel] = {}
        for file_name in self._bundle_files():
            name = logical_name(file_name, self._wg_interface)
            try:
                body = self._read_file(file_name)
            except (OSError, UnicodeDecodeError) as ex:
                log.warning("Skipping unreadable client bundle %s: %s", file_name, ex)
                continue
            ipv4, ipv6 = extract_addresses(body)
            if ipv4 is None:
                log.warning("Client bundle %s has no [Interface] Address", file_name)
            if name in clients:
                log.warning("Client %s has more than one bundle file, using %s", name, file_name)
            clients[name] = ClientRecordModel(name=name, ipv4=ipv4, ipv6=ipv6, config=body)
        return sorted(clients.values(), key=lambda client: client.name)

    def exists(self, name: str) -> bool:
        return any(os.path.isfile(self._path(file_name)) for file_name in self._candidates(name))

    def read(self, name: str) -> Optional[str]:
        """Return the bundle of the client from the first naming variant that exists."""
        for file_name in self._candidates(name):
            try:
                return self._read_file(file_name)
            except FileNotFoundError:
                continue
            except OSError as ex:
                raise StorageException(f"Failed to read client config: {ex}")
        return None

    def create(self, name: str, body: str) -> str:
        """Write a new bundle under the canonical name.  Returns the path."""
        try:
            os.makedirs(self._directory, mode=0o700, exist_ok=True)
        except OSError as ex:
            raise StorageException(f"Failed to create clients directory: {ex}")

        path = self._path(canonical_file_name(name, self._wg_interface))
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError:
            raise ConflictException(f"A client config already exists at {path}")
        except OSError as ex:
            raise StorageException(f"Failed to write client config: {ex}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(body)
        except OSError as ex:
            raise StorageException(f"Failed to write client config: {ex}")
        return path

    def _remove(self, file_name: str) -> bool:
        try:
            os.remove(self._path(file_name))
        except OSError as ex:
            if ex.errno == errno.ENOENT:
                return False
            raise StorageException(f"Failed to delete client config: {ex}")
        return True

    def delete(self, name: str) -> list[str]:
        """Remove every naming variant of the client bundle.  Returns the names of the files that were removed."""
        return [file_name for file_name in self._candidates(name) if self._remove(file_name)]

    def delete_all(self) -> list[str]:
        return [file_name for file_name in self._bundle_files() if self._remove(file_name)]
