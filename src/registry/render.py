from typing import Optional

from models.params import ServerParametersModel

"""
Text renderers for the two file formats the registry writes.  The layout (field order, spacing, blank lines) must
match what wg-quick and the install script produce, so these are plain templates rather than a generic ini writer.
"""

CLIENT_MARKER = "### Client "


def _addresses(ipv4: str, ipv6: Optional[str]) -> str:
    if ipv6:
        return f"{ipv4}/32,{ipv6}/128"
    return f"{ipv4}/32"


def render_peer_block(name: str, public_key: str, preshared_key: str, ipv4: str, ipv6: Optional[str]) -> str:
    """The stanza appended to the server config file for a client, without surrounding blank lines."""
    return f"""{CLIENT_MARKER}{name}
[Peer]
PublicKey = {public_key}
PresharedKey = {preshared_key}
AllowedIPs = {_addresses(ipv4, ipv6)}
"""


def render_client_bundle(
    server_params: ServerParametersModel, private_key: str, preshared_key: str, ipv4: str, ipv6: Optional[str]
) -> str:
    """The configuration file handed to the end user."""
    return f"""[Interface]
PrivateKey = {private_key}
Address = {_addresses(ipv4, ipv6)}
DNS = {server_params.client_dns_1},{server_params.client_dns_2}

[Peer]
PublicKey = {server_params.server_pub_key}
PresharedKey = {preshared_key}
Endpoint = {server_params.endpoint}
AllowedIPs = {server_params.allowed_ips}
"""
