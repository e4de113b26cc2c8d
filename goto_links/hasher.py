"""Short identifier derivation."""

from blake3 import blake3


DEFAULT_ID_LENGTH = 5


class Hasher:
    """Derive short identifiers from target URLs."""

    def __init__(self, length: int = DEFAULT_ID_LENGTH):
        """Initialize hasher.

        Args:
            length: Number of hex characters kept from the digest
        """
        if length < 1 or length > 64:
            raise ValueError("length must be between 1 and 64")
        self.length = length

    def derive_id(self, target: str) -> str:
        """Derive an identifier from a target URL.

        The same target always yields the same identifier. Distinct targets
        may collide; the store reports that as an ordinary conflict.

        Args:
            target: The target URL

        Returns:
            Lowercase hex prefix of the BLAKE3 digest of the target
        """
        return blake3(target.encode("utf-8", "surrogatepass")).hexdigest()[:self.length]


_default = Hasher()


def derive_id(target: str) -> str:
    """Derive a 5-character identifier with the default hasher."""
    return _default.derive_id(target)
