from __future__ import annotations
import typing
from enum import Enum

if typing.TYPE_CHECKING:
    from server_manager.interface import AbstractKeyGenerator

DEFAULT_COMMAND_TIMEOUT = 30.0


class KeyBackend(str, Enum):
    WG = "wg"
    NATIVE = "native"


def key_generator_factory(
    key_backend: KeyBackend, timeout: float = DEFAULT_COMMAND_TIMEOUT
) -> AbstractKeyGenerator:
    """
    Factory function to create an instance of the appropriate key generator based on the backend.
    :param key_backend: Either the wg command line tool, or the in-process X25519 implementation.
    :param timeout: The timeout in seconds for each external command.
    :return: An instance of a class that implements AbstractKeyGenerator.
    """
    if key_backend == KeyBackend.WG:
        from server_manager.wireguard import WgKeyGenerator

        return WgKeyGenerator(timeout=timeout)
    if key_backend == KeyBackend.NATIVE:
        from server_manager.native import NativeKeyGenerator

        return NativeKeyGenerator()
    else:
        raise ValueError(f"Unsupported key backend: {key_backend}")
