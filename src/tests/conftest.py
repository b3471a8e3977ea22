import os

import pytest

from registry import ClientRegistry
from registry.params import load_server_parameters
from server_manager.wireguard import WgKeyGenerator, WgQuickDaemonSync
from tests.client.mock_client import MockWgCommand

SERVER_CONFIG = """[Interface]
Address = 10.66.66.1/24,fd42:42:42::1/64
ListenPort = 51820
PrivateKey = c2VydmVyLXByaXZhdGUta2V5LXNlcnZlci1wcml2YXRlLQ==
PostUp = iptables -A FORWARD -i wg0 -j ACCEPT
PostDown = iptables -D FORWARD -i wg0 -j ACCEPT
"""

PARAMS = """SERVER_PUB_IP=203.0.113.10
SERVER_PUB_NIC=eth0
SERVER_WG_NIC=wg0
SERVER_WG_IPV4=10.66.66.1
SERVER_WG_IPV6=fd42:42:42::1
SERVER_PORT=51820
SERVER_PRIV_KEY=c2VydmVyLXByaXZhdGUta2V5LXNlcnZlci1wcml2YXRlLQ==
SERVER_PUB_KEY=c2VydmVyLXB1YmxpYy1rZXktc2VydmVyLXB1YmxpYy0=
CLIENT_DNS_1=1.1.1.1
CLIENT_DNS_2=1.0.0.1
ALLOWED_IPS="0.0.0.0/0,::/0"
"""


def write_file(path, text: str) -> str:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return str(path)


def read_file(path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


@pytest.fixture(scope="function")
def params_file(tmp_path):
    return write_file(tmp_path / "params", PARAMS)


@pytest.fixture(scope="function")
def server_params(params_file):
    return load_server_parameters(params_file)


@pytest.fixture(scope="function")
def config_file(tmp_path):
    path = write_file(tmp_path / "wg0.conf", SERVER_CONFIG)
    os.chmod(path, 0o600)
    return path


@pytest.fixture(scope="function")
def clients_dir(tmp_path):
    # Not created up front, the registry is expected to create it.
    return str(tmp_path / "users")


@pytest.fixture(scope="function")
def mock_wg_command(mocker):
    mock_command = MockWgCommand(wg_interface="wg0")
    mocker.patch("server_manager.wireguard.subprocess.run", side_effect=mock_command.run)
    return mock_command


@pytest.fixture(scope="function")
def client_registry(server_params, config_file, clients_dir, mock_wg_command):
    return ClientRegistry(
        server_params=server_params,
        config_file=config_file,
        clients_dir=clients_dir,
        key_generator=WgKeyGenerator(timeout=5),
        daemon_sync=WgQuickDaemonSync(timeout=5),
    )
