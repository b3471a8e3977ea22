import logging

from models.exceptions import ConfigurationException
from models.params import ServerParametersModel

log = logging.getLogger(__name__)

"""This module loads the parameters written by the wireguard install script, e.g. /etc/wireguard/params"""

# params file key -> ServerParametersModel field
PARAMS_FILE_KEYS = {
    "SERVER_PUB_IP": "server_pub_ip",
    "SERVER_PUB_NIC": "server_pub_nic",
    "SERVER_WG_NIC": "server_wg_nic",
    "SERVER_WG_IPV4": "server_wg_ipv4",
    "SERVER_WG_IPV6": "server_wg_ipv6",
    "SERVER_PORT": "server_port",
    "SERVER_PRIV_KEY": "server_priv_key",
    "SERVER_PUB_KEY": "server_pub_key",
    "CLIENT_DNS_1": "client_dns_1",
    "CLIENT_DNS_2": "client_dns_2",
    "ALLOWED_IPS": "allowed_ips",
}
REQUIRED_KEYS = ["SERVER_PUB_IP", "SERVER_WG_NIC", "SERVER_PUB_KEY", "SERVER_PORT", "SERVER_WG_IPV4"]


def parse_params(text: str) -> dict[str, str]:
    """
    Parse KEY=VALUE lines.  Lines without an '=' are ignored, and quotes surrounding the value are removed.
    """
    params = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key.startswith("#"):
            continue
        params[key] = value.strip().strip("\"'")
    return params


def load_server_parameters(path: str) -> ServerParametersModel:
    """
    Read the params file into an immutable ServerParametersModel.
    Raises ConfigurationException if the file cannot be read or a required parameter is missing.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as ex:
        raise ConfigurationException(f"Failed to open params file {path}: {ex}")

    params = parse_params(text)
    missing = [key for key in REQUIRED_KEYS if not params.get(key)]
    if missing:
        raise ConfigurationException(f"Required WireGuard parameters missing from {path}: {', '.join(missing)}")

    server_params = ServerParametersModel(
        **{field: params[key] for key, field in PARAMS_FILE_KEYS.items() if key in params}
    )
    log.info(
        "Loaded WireGuard parameters for interface %s (IPv4 %s, IPv6 %s)",
        server_params.server_wg_nic,
        server_params.server_wg_ipv4,
        server_params.server_wg_ipv6 or "disabled",
    )
    return server_params
