import os
import stat

import pytest

from models.exceptions import StorageException
from registry.server_config import ServerConfigFile
from tests.conftest import SERVER_CONFIG, read_file, write_file

ALICE_BLOCK = """### Client alice
[Peer]
PublicKey = QUxJQ0UtUFVC
PresharedKey = QUxJQ0UtUFNL
AllowedIPs = 10.66.66.2/32,fd42:42:42::2/128
"""


def test_append_client(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("alice", "QUxJQ0UtUFVC", "QUxJQ0UtUFNL", "10.66.66.2", "fd42:42:42::2")
    assert read_file(config_file) == SERVER_CONFIG + "\n" + ALICE_BLOCK


def test_append_client_without_ipv6(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("bob", "PUB", "PSK", "10.66.66.3", None)
    assert read_file(config_file).endswith("### Client bob\n[Peer]\nPublicKey = PUB\nPresharedKey = PSK\nAllowedIPs = 10.66.66.3/32\n")


def test_append_to_file_without_trailing_newline(tmp_path):
    path = write_file(tmp_path / "wg0.conf", SERVER_CONFIG.rstrip("\n"))
    ServerConfigFile(path).append_client("alice", "QUxJQ0UtUFVC", "QUxJQ0UtUFNL", "10.66.66.2", "fd42:42:42::2")
    assert read_file(path) == SERVER_CONFIG + "\n" + ALICE_BLOCK


def test_has_client(config_file):
    server_config = ServerConfigFile(config_file)
    assert server_config.has_client(["alice"]) is False
    server_config.append_client("wg0-client-alice", "PUB", "PSK", "10.66.66.2", None)
    assert server_config.has_client(["alice"]) is False
    assert server_config.has_client(["alice", "wg0-client-alice"]) is True
    # A longer name sharing the prefix is a different client
    assert server_config.has_client(["wg0-client-ali"]) is False


def test_add_then_remove_is_byte_identical(config_file):
    original = read_file(config_file)
    server_config = ServerConfigFile(config_file)
    server_config.append_client("vpnclient1", "PUB", "PSK", "10.8.0.5", "fd00::5")
    assert read_file(config_file) != original
    assert server_config.remove_client(["vpnclient1"]) == 1
    assert read_file(config_file) == original


def test_remove_middle_client_leaves_others_untouched(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("alice", "PUB1", "PSK1", "10.66.66.2", None)
    with_alice = read_file(config_file)
    server_config.append_client("bob", "PUB2", "PSK2", "10.66.66.3", None)
    server_config.append_client("carol", "PUB3", "PSK3", "10.66.66.4", None)

    assert server_config.remove_client(["bob"]) == 1
    text = read_file(config_file)
    assert "### Client bob" not in text
    assert "PUB2" not in text
    assert text == with_alice + "\n### Client carol\n[Peer]\nPublicKey = PUB3\nPresharedKey = PSK3\nAllowedIPs = 10.66.66.4/32\n"


def test_remove_blocks_without_separating_blank_line(tmp_path):
    text = SERVER_CONFIG + "\n### Client alice\n[Peer]\nPublicKey = A\n### Client bob\n[Peer]\nPublicKey = B\n"
    path = write_file(tmp_path / "wg0.conf", text)
    assert ServerConfigFile(path).remove_client(["alice"]) == 1
    assert read_file(path) == SERVER_CONFIG + "### Client bob\n[Peer]\nPublicKey = B\n"


def test_remove_all_naming_variants(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("alice", "PUB1", "PSK1", "10.66.66.2", None)
    server_config.append_client("wg0-client-alice", "PUB2", "PSK2", "10.66.66.3", None)
    server_config.append_client("alice2", "PUB3", "PSK3", "10.66.66.4", None)
    assert server_config.remove_client(["alice", "wg0-client-alice"]) == 2
    text = read_file(config_file)
    assert server_config.has_client(["alice", "wg0-client-alice"], text=text) is False
    assert "### Client alice2" in text


def test_remove_missing_client_does_not_rewrite(config_file):
    before = os.stat(config_file).st_mtime_ns
    assert ServerConfigFile(config_file).remove_client(["nobody"]) == 0
    assert read_file(config_file) == SERVER_CONFIG
    assert os.stat(config_file).st_mtime_ns == before


def test_rewrite_is_owner_only(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("alice", "PUB", "PSK", "10.66.66.2", None)
    server_config.remove_client(["alice"])
    assert stat.S_IMODE(os.stat(config_file).st_mode) == 0o600
    # No temporary files are left behind
    assert sorted(os.listdir(os.path.dirname(config_file))) == ["wg0.conf"]


def test_client_names(config_file):
    server_config = ServerConfigFile(config_file)
    server_config.append_client("alice", "PUB1", "PSK1", "10.66.66.2", None)
    server_config.append_client("wg0-client-bob", "PUB2", "PSK2", "10.66.66.3", None)
    server_config.append_client("wg1-client-carol", "PUB3", "PSK3", "10.66.66.4", None)
    assert server_config.client_names("wg1") == ["alice", "bob", "carol"]


def test_remove_all_clients(config_file):
    server_config = ServerConfigFile(config_file)
    for index, name in enumerate(["alice", "bob", "carol"]):
        server_config.append_client(name, "PUB", "PSK", f"10.66.66.{index + 2}", None)
    assert server_config.remove_all_clients() == 3
    assert read_file(config_file) == SERVER_CONFIG


def test_missing_config_file(tmp_path):
    server_config = ServerConfigFile(str(tmp_path / "missing.conf"))
    with pytest.raises(StorageException):
        server_config.read()
    with pytest.raises(StorageException):
        server_config.remove_client(["alice"])
