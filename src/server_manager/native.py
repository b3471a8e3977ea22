import base64
import codecs
import os

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from models.exceptions import ExternalToolException
from server_manager.interface import AbstractKeyGenerator


class NativeKeyGenerator(AbstractKeyGenerator):
    """
    Generate key material in-process.  This matches `wg genkey | wg pubkey` and `wg genpsk`: 32-byte raw keys,
    base64 encoded.  Useful on hosts where the wg binary is not installed next to the API.
    """

    @staticmethod
    def _encode(raw: bytes) -> str:
        return codecs.encode(raw, "base64").decode("utf8").strip()

    def generate_private_key(self) -> str:
        private_key = X25519PrivateKey.generate()
        bytes_ = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return self._encode(bytes_)

    def derive_public_key(self, private_key: str) -> str:
        try:
            raw = base64.b64decode(private_key, validate=True)
            pubkey = (
                X25519PrivateKey.from_private_bytes(raw)
                .public_key()
                .public_bytes(encoding=serialization.Encoding.Raw, format=serialization.PublicFormat.Raw)
            )
        except ValueError as ex:
            raise ExternalToolException(f"Failed to derive public key: {ex}")
        return self._encode(pubkey)

    def generate_preshared_key(self) -> str:
        return base64.b64encode(os.urandom(32)).decode("ascii")
