import pytest

from models.exceptions import ConfigurationException, ErrorKind
from registry.params import load_server_parameters, parse_params
from tests.conftest import PARAMS, write_file


def test_load_server_parameters(server_params):
    assert server_params.server_pub_ip == "203.0.113.10"
    assert server_params.server_pub_nic == "eth0"
    assert server_params.server_wg_nic == "wg0"
    assert server_params.server_wg_ipv4 == "10.66.66.1"
    assert server_params.server_wg_ipv6 == "fd42:42:42::1"
    assert server_params.server_port == "51820"
    assert server_params.server_pub_key == "c2VydmVyLXB1YmxpYy1rZXktc2VydmVyLXB1YmxpYy0="
    assert server_params.client_dns_1 == "1.1.1.1"
    assert server_params.client_dns_2 == "1.0.0.1"
    # Quotes around the value are removed
    assert server_params.allowed_ips == "0.0.0.0/0,::/0"
    assert server_params.ipv6_enabled is True
    assert server_params.endpoint == "203.0.113.10:51820"


def test_server_private_key_is_secret(server_params):
    assert "c2VydmVyLXByaXZhdGUta2V5" not in str(server_params)
    assert server_params.server_priv_key.get_secret_value().startswith("c2VydmVyLXByaXZhdGUta2V5")


def test_parameters_are_immutable(server_params):
    with pytest.raises(Exception):
        server_params.server_wg_nic = "wg1"


def test_parse_params_ignores_blank_and_malformed_lines():
    params = parse_params(
        """
# a comment = ignored
SERVER_WG_NIC = 'wg1'
this line has no separator

SERVER_PUB_KEY=abc=
"""
    )
    assert params == {"SERVER_WG_NIC": "wg1", "SERVER_PUB_KEY": "abc="}


@pytest.mark.parametrize("missing_key", ["SERVER_PUB_IP", "SERVER_WG_NIC", "SERVER_PUB_KEY", "SERVER_PORT", "SERVER_WG_IPV4"])
def test_missing_required_parameter(tmp_path, missing_key):
    text = "\n".join(line for line in PARAMS.splitlines() if not line.startswith(missing_key + "="))
    path = write_file(tmp_path / "params", text)
    with pytest.raises(ConfigurationException) as ex:
        load_server_parameters(path)
    assert missing_key in str(ex.value)
    assert ex.value.kind == ErrorKind.CONFIGURATION


def test_empty_required_parameter(tmp_path):
    path = write_file(tmp_path / "params", PARAMS.replace("SERVER_PORT=51820", 'SERVER_PORT=""'))
    with pytest.raises(ConfigurationException):
        load_server_parameters(path)


def test_optional_parameters_default_to_empty(tmp_path):
    text = "\n".join(
        line
        for line in PARAMS.splitlines()
        if line.split("=")[0] in ("SERVER_PUB_IP", "SERVER_WG_NIC", "SERVER_PUB_KEY", "SERVER_PORT", "SERVER_WG_IPV4")
    )
    server_params = load_server_parameters(write_file(tmp_path / "params", text))
    assert server_params.server_wg_ipv6 == ""
    assert server_params.ipv6_enabled is False
    assert server_params.allowed_ips == ""


def test_missing_params_file(tmp_path):
    with pytest.raises(ConfigurationException):
        load_server_parameters(str(tmp_path / "does-not-exist"))


@pytest.mark.parametrize(
    "public_ip,expected",
    [
        ("vpn.example.com", "vpn.example.com:51820"),
        ("2001:db8::10", "[2001:db8::10]:51820"),
        ("[2001:db8::10]", "[2001:db8::10]:51820"),
    ],
)
def test_endpoint(tmp_path, public_ip, expected):
    path = write_file(tmp_path / "params", PARAMS.replace("SERVER_PUB_IP=203.0.113.10", f"SERVER_PUB_IP={public_ip}"))
    assert load_server_parameters(path).endpoint == expected
