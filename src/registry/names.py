import re
from typing import Optional

from models.exceptions import ValidationException

"""
Clients have been written to disk under several naming schemes over time.  For a logical client name `alice`
on interface `wg1`, any of the following identifiers refers to the same client, both as a `### Client` marker
in the server config file and as a bundle file name (with a .conf suffix) in the clients directory:

  alice
  wg0-client-alice
  wg1-client-alice

The forms overlap: a client literally named `wg0-client-bob` is also one of the identifiers of `bob`, so deleting
`bob` removes its block and bundle as well.
"""

CLIENT_NAME_REGEX = re.compile(r"^[a-zA-Z0-9_-]{1,15}$")
IDENTIFIER_REGEX = re.compile(r"^[a-zA-Z0-9_-]+$")
LEGACY_PREFIX = "wg0"
CLIENT_FILE_SUFFIX = ".conf"


def validate_client_name(name: str) -> None:
    if not isinstance(name, str) or not CLIENT_NAME_REGEX.match(name):
        raise ValidationException(
            "Client name must contain only alphanumeric characters, underscores, or dashes and be less than 16 "
            "characters"
        )


def _prefix(wg_interface: str) -> str:
    return f"{wg_interface}-client-"


def candidate_names(name: str, wg_interface: str) -> list[str]:
    """Return the identifiers a client may be stored under, in lookup order."""
    candidates = []
    for candidate in (name, _prefix(LEGACY_PREFIX) + name, _prefix(wg_interface) + name):
        if candidate not in candidates:
            candidates.append(candidate)
    return candidates


def candidate_file_names(name: str, wg_interface: str) -> list[str]:
    return [candidate + CLIENT_FILE_SUFFIX for candidate in candidate_names(name, wg_interface)]


def canonical_file_name(name: str, wg_interface: str) -> str:
    """New bundles are always written under the interface prefixed name."""
    return _prefix(wg_interface) + name + CLIENT_FILE_SUFFIX


def logical_name(identifier: str, wg_interface: str) -> Optional[str]:
    """
    Map a marker or file name back to the logical client name.  Returns None if the identifier is not one
    of the recognized forms.
    """
    if identifier.endswith(CLIENT_FILE_SUFFIX):
        identifier = identifier[: -len(CLIENT_FILE_SUFFIX)]
    for prefix in (_prefix(wg_interface), _prefix(LEGACY_PREFIX)):
        if identifier.startswith(prefix) and len(identifier) > len(prefix):
            identifier = identifier[len(prefix) :]
            break
    if not IDENTIFIER_REGEX.match(identifier):
        return None
    return identifier
