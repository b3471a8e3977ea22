import ipaddress
import logging
import threading
from typing import Optional

from models.clients import ClientRecordModel, DeleteAllResultModel
from models.exceptions import ConflictException, NotFoundException, ValidationException
from models.params import ServerParametersModel
from registry.allocator import ipv4_in_use, ipv6_in_use, next_ipv4, next_ipv6
from registry.client_store import ClientFileStore
from registry.names import candidate_names, validate_client_name
from registry.render import render_client_bundle
from registry.server_config import ServerConfigFile
from server_manager.interface import AbstractDaemonSync, AbstractKeyGenerator

log = logging.getLogger(__name__)

"""
This module is the interface between the API and the files on disk.

Adding and deleting a client are multi-step operations (client file, server config, daemon sync) and are not
transactional.  If a step fails the earlier steps are not undone.  Re-running the operation is safe: the existence
check and the idempotent file removal make retries converge.
"""


class ClientRegistry:
    def __init__(
        self,
        server_params: ServerParametersModel,
        config_file: str,
        clients_dir: str,
        key_generator: AbstractKeyGenerator,
        daemon_sync: AbstractDaemonSync,
    ):
        self._params = server_params
        self._server_config = ServerConfigFile(config_file)
        self._client_store = ClientFileStore(clients_dir, server_params.server_wg_nic, excluded_paths=[config_file])
        self._key_generator = key_generator
        self._daemon_sync = daemon_sync
        # Guards read config -> allocate -> write config -> sync daemon
        self._lock = threading.Lock()

    @property
    def server_params(self) -> ServerParametersModel:
        return self._params

    @property
    def wg_interface(self) -> str:
        return self._params.server_wg_nic

    def list_clients(self) -> list[ClientRecordModel]:
        return self._client_store.list_clients()

    def client_exists(self, name: str) -> bool:
        """A client exists if either its config block or its bundle file exists, under any naming variant."""
        if self._server_config.has_client(candidate_names(name, self.wg_interface)):
            return True
        return self._client_store.exists(name)

    @staticmethod
    def _validate_address(address: str, version: int) -> str:
        try:
            ip = ipaddress.ip_address(address)
        except ValueError:
            raise ValidationException(f"{address} is not a valid IP address")
        if ip.version != version:
            raise ValidationException(f"{address} is not an IPv{version} address")
        return ip.compressed

    def _resolve_addresses(
        self, config_text: str, ipv4: Optional[str], ipv6: Optional[str]
    ) -> tuple[str, Optional[str]]:
        if ipv4:
            ipv4 = self._validate_address(ipv4, 4)
            if ipv4_in_use(self._params.server_wg_ipv4, ipv4, config_text):
                raise ConflictException(f"IP address {ipv4} is already assigned")
        else:
            ipv4 = next_ipv4(self._params.server_wg_ipv4, config_text)

        if ipv6:
            ipv6 = self._validate_address(ipv6, 6)
            if self._params.ipv6_enabled and ipv6_in_use(self._params.server_wg_ipv6, ipv6, config_text):
                raise ConflictException(f"IP address {ipv6} is already assigned")
        elif self._params.ipv6_enabled:
            ipv6 = next_ipv6(self._params.server_wg_ipv6, config_text)
        return ipv4, ipv6 or None

    def add_client(self, name: str, ipv4: Optional[str] = None, ipv6: Optional[str] = None) -> ClientRecordModel:
        validate_client_name(name)
        with self._lock:
            if self.client_exists(name):
                raise ConflictException("A client with this name already exists")

            config_text = self._server_config.read()
            ipv4, ipv6 = self._resolve_addresses(config_text, ipv4, ipv6)

            private_key, public_key = self._key_generator.generate_key_pair()
            preshared_key = self._key_generator.generate_preshared_key()
            bundle = render_client_bundle(self._params, private_key, preshared_key, ipv4, ipv6)

            self._client_store.create(name, bundle)
            self._server_config.append_client(name, public_key, preshared_key, ipv4, ipv6)
            self._daemon_sync.sync_interface(self.wg_interface)

        log.info("Added client %s with addresses %s %s", name, ipv4, ipv6 or "")
        return ClientRecordModel(name=name, ipv4=ipv4, ipv6=ipv6, config=bundle)

    def delete_client(self, name: str) -> None:
        validate_client_name(name)
        with self._lock:
            if not self.client_exists(name):
                raise NotFoundException("Client not found")

            identifiers = candidate_names(name, self.wg_interface)
            if not self._server_config.remove_client(identifiers):
                log.warning("Client %s had no block in %s", name, self._server_config.path)
            if not self._client_store.delete(name):
                log.warning("Client %s had no bundle file in %s", name, self._client_store.directory)
            self._daemon_sync.sync_interface(self.wg_interface)

        log.info("Deleted client %s", name)

    def delete_all_clients(self) -> DeleteAllResultModel:
        with self._lock:
            clients = {client.name: client for client in self._client_store.list_clients()}
            for name in self._server_config.client_names(self.wg_interface):
                clients.setdefault(name, ClientRecordModel(name=name))

            self._server_config.remove_all_clients()
            files_deleted = self._client_store.delete_all()
            self._daemon_sync.sync_interface(self.wg_interface)

        deleted = sorted(clients.values(), key=lambda client: client.name)
        log.info("Deleted all %d clients", len(deleted))
        return DeleteAllResultModel(deleted_count=len(deleted), clients=deleted, files_deleted=files_deleted)
