"""Pure domain functions for decoding Key Vault secret names.

A rotatable secret is named ``<account>[-<container>]-<kind>``, for example::

    sacscdnausedlhdevlz-accountKey
    sacscdnausedlhdevlz-sasUri
    sacscdnausedlhdevlz-data-service-sasToken

Key Vault names may only contain alphanumerics and hyphens, so container
names that contain hyphens are recovered positionally: everything between
the first and the last segment is the container.
"""

from sasrotate.constants import SECRET_NAME_SEPARATOR
from sasrotate.models import CredentialKind, SecretDescriptor, UnrecognizedKindError

SEPARATOR = SECRET_NAME_SEPARATOR


def split_secret_name(raw_name: str) -> tuple[str, ...]:
    """Split a secret name into ``(account, kind)`` or ``(account, container, kind)``.

    Names with more than three segments have their middle segments rejoined
    into a single container segment. One-segment names are returned as-is;
    the caller decides what to do with them.
    """
    tokens = tuple(raw_name.split(SEPARATOR))
    if len(tokens) > 3:
        return (tokens[0], SEPARATOR.join(tokens[1:-1]), tokens[-1])
    return tokens


def decode_secret_name(raw_name: str) -> SecretDescriptor:
    """Decode a Key Vault secret name into a ``SecretDescriptor``.

    Raises ``UnrecognizedKindError`` if the last segment is not one of the
    known credential kinds (single-segment names always land here), and
    ``UnexpectedContainerError`` if an account-scoped kind has a container.
    """
    tokens = split_secret_name(raw_name)
    if len(tokens) < 2:
        raise UnrecognizedKindError(
            f"Secret name '{raw_name}' has no storage account and credential kind segments"
        )

    kind = CredentialKind.from_label(tokens[-1])
    container = tokens[1] if len(tokens) == 3 else None
    return SecretDescriptor(storage_account=tokens[0], kind=kind, container=container)


def encode_secret_name(descriptor: SecretDescriptor) -> str:
    """Return the canonical secret name for ``descriptor``."""
    return descriptor.secret_name
