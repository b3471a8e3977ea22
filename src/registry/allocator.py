import ipaddress
import re

from models.exceptions import ConfigurationException, PoolExhaustedException

"""
Address allocation.  There is no allocation ledger: the addresses in use are whatever appears in the server config
file, so every allocation rescans the text.  Both pools hand out hosts 2..254; .1 / ::1 belongs to the server.
"""

FIRST_HOST = 2
LAST_HOST = 254


def ipv4_base(server_ipv4: str) -> str:
    """10.66.66.1 -> 10.66.66"""
    parts = server_ipv4.split(".")
    if len(parts) != 4:
        raise ConfigurationException(f"Invalid server IPv4 address format: {server_ipv4}")
    return ".".join(parts[:3])


def ipv6_base(server_ipv6: str) -> str:
    """fd42:42:42::1 -> fd42:42:42"""
    parts = server_ipv6.split("::")
    if len(parts) != 2:
        raise ConfigurationException(f"Invalid server IPv6 address format: {server_ipv6}")
    return parts[0]


def used_ipv4_hosts(server_ipv4: str, config_text: str) -> set[int]:
    pattern = re.compile(r"(?<![\d.])" + re.escape(ipv4_base(server_ipv4)) + r"\.(\d+)")
    return {int(match) for match in pattern.findall(config_text)}


def used_ipv6_hosts(server_ipv6: str, config_text: str) -> set[int]:
    pattern = re.compile(r"(?<![0-9a-fA-F:])" + re.escape(ipv6_base(server_ipv6)) + r"::([0-9a-fA-F]+)")
    return {int(match, 16) for match in pattern.findall(config_text)}


def _lowest_free(used: set[int]) -> int | None:
    for host in range(FIRST_HOST, LAST_HOST + 1):
        if host not in used:
            return host
    return None


def next_ipv4(server_ipv4: str, config_text: str) -> str:
    """Return the lowest free IPv4 address in the server subnet."""
    host = _lowest_free(used_ipv4_hosts(server_ipv4, config_text))
    if host is None:
        raise PoolExhaustedException("No available IPv4 addresses in the subnet")
    return f"{ipv4_base(server_ipv4)}.{host}"


def next_ipv6(server_ipv6: str, config_text: str) -> str:
    """
    Return the lowest free IPv6 address under the server prefix.  The host part is written in hex, the same way it
    is read back, but the pool is limited to the same 253 hosts as IPv4.
    """
    host = _lowest_free(used_ipv6_hosts(server_ipv6, config_text))
    if host is None:
        raise PoolExhaustedException("No available IPv6 addresses in the subnet")
    return f"{ipv6_base(server_ipv6)}::{host:x}"


def ipv4_in_use(server_ipv4: str, address: str, config_text: str) -> bool:
    """Return true if the address is in the server subnet and already appears in the config text."""
    try:
        address = ipaddress.IPv4Address(address).compressed
    except ValueError:
        return False
    prefix, _, host = address.rpartition(".")
    if prefix != ipv4_base(server_ipv4) or not host.isdigit():
        return False
    return int(host) in used_ipv4_hosts(server_ipv4, config_text)


def ipv6_in_use(server_ipv6: str, address: str, config_text: str) -> bool:
    """Return true if the address is under the server prefix and already appears in the config text."""
    try:
        address = ipaddress.IPv6Address(address).compressed
    except ValueError:
        return False
    prefix, _, host = address.rpartition("::")
    if prefix != ipv6_base(server_ipv6).lower() or not host or ":" in host:
        return False
    return int(host, 16) in used_ipv6_hosts(server_ipv6, config_text)
