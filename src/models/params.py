from pydantic import BaseModel, ConfigDict, Field, SecretStr


"""This module contains the pydantic model for the parameters of the wireguard server itself"""


class ServerParametersModel(BaseModel):
    """The wireguard server parameters, as read from the params file written by the install script."""

    model_config = ConfigDict(frozen=True)

    server_pub_ip: str = Field(..., description="The public IP address (or hostname) clients connect to.")
    server_pub_nic: str = Field("", description="The public network interface of the server.")
    server_wg_nic: str = Field(..., description="The wireguard interface name, e.g. wg0.")
    server_wg_ipv4: str = Field(..., description="The IPv4 address of the server on the VPN, e.g. 10.66.66.1")
    server_wg_ipv6: str = Field("", description="The IPv6 address of the server on the VPN, e.g. fd42:42:42::1")
    server_port: str = Field(..., description="The port the wireguard daemon listens on.")
    server_priv_key: SecretStr = Field(SecretStr(""), description="The private key of the server.")
    server_pub_key: str = Field(..., description="The public key of the server.")
    client_dns_1: str = Field("", description="The first DNS server handed to the clients.")
    client_dns_2: str = Field("", description="The second DNS server handed to the clients.")
    allowed_ips: str = Field("", description="The AllowedIPs written into the client bundles.")

    @property
    def ipv6_enabled(self) -> bool:
        return bool(self.server_wg_ipv6)

    @property
    def endpoint(self) -> str:
        host = self.server_pub_ip
        if ":" in host and "[" not in host:
            host = f"[{host}]"
        return f"{host}:{self.server_port}"
