import abc


class AbstractKeyGenerator(metaclass=abc.ABCMeta):
    """This is an interface that abstracts away how wireguard key material is generated"""

    @abc.abstractmethod
    def generate_private_key(self) -> str:
        """Return a new base64 encoded private key."""
        pass

    @abc.abstractmethod
    def derive_public_key(self, private_key: str) -> str:
        """Return the base64 encoded public key for the given private key."""
        pass

    @abc.abstractmethod
    def generate_preshared_key(self) -> str:
        """Return a new base64 encoded pre-shared key."""
        pass

    def generate_key_pair(self) -> tuple[str, str]:
        """
        Generate a new WireGuard key pair
        :return: (private_key, public_key)
        """
        private_key = self.generate_private_key()
        return private_key, self.derive_public_key(private_key)


class AbstractDaemonSync(metaclass=abc.ABCMeta):
    """This is an interface that abstracts away pushing the edited config file into the running daemon"""

    @abc.abstractmethod
    def sync_interface(self, wg_interface: str) -> None:
        """
        Live-apply the on-disk configuration of the interface without tearing down existing sessions.
        Raises ExternalToolException if the daemon could not be synchronized.
        """
        pass
