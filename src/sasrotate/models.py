"""Domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto

from sasrotate.constants import (
    SAS_PERMISSIONS,
    SAS_RESOURCE_TYPES,
    SAS_SERVICES,
    SECRET_NAME_SEPARATOR,
)


class SecretNameError(ValueError):
    """Raised when a Key Vault secret name cannot be decoded into a descriptor."""


class UnrecognizedKindError(SecretNameError):
    """The last segment of the name is not a known credential kind."""


class UnexpectedContainerError(SecretNameError):
    """An account-scoped credential kind was given a container segment."""


class CredentialKind(Enum):
    """The credential types that can be rotated, keyed by their name suffix."""

    ACCOUNT_CONN_STR = "accountConnStr"
    ACCOUNT_KEY = "accountKey"
    SAS_TOKEN = "sasToken"
    SAS_URI = "sasUri"

    @property
    def is_account_scoped(self) -> bool:
        return self in (CredentialKind.ACCOUNT_KEY, CredentialKind.ACCOUNT_CONN_STR)

    @classmethod
    def from_label(cls, label: str) -> "CredentialKind":
        """Return the kind whose label equals ``label`` exactly (case-sensitive)."""
        for kind in cls:
            if kind.value == label:
                return kind
        labels = ", ".join(k.value for k in cls)
        raise UnrecognizedKindError(f"Secret does not end with one of: [{labels}] (found: {label})")


@dataclass(frozen=True)
class SecretDescriptor:
    """The parsed identity of a rotation target.

    Account-scoped kinds (``accountKey``, ``accountConnStr``) never carry a
    container; constructing one that does raises ``UnexpectedContainerError``.
    The storage account is the first name segment, so it cannot hold a hyphen.
    """

    storage_account: str
    kind: CredentialKind
    container: str | None = None

    def __post_init__(self) -> None:
        if not self.storage_account:
            raise SecretNameError("Secret name has an empty storage account segment")
        if SECRET_NAME_SEPARATOR in self.storage_account:
            raise SecretNameError(
                f"Storage account '{self.storage_account}' must not contain "
                f"'{SECRET_NAME_SEPARATOR}'"
            )
        if self.container is not None and self.kind.is_account_scoped:
            raise UnexpectedContainerError(
                f"Secret type is account-scoped but secret name contains extra value(s): "
                f"{self.container}"
            )

    @property
    def secret_name(self) -> str:
        """The canonical ``<account>[-<container>]-<kind>`` Key Vault name."""
        parts = [self.storage_account]
        if self.container is not None:
            parts.append(self.container)
        parts.append(self.kind.value)
        return "-".join(parts)


@dataclass(frozen=True)
class SasRequest:
    """Parameters handed to the SAS signer.

    ``resource_types`` and ``services`` only apply to account-level tokens;
    container tokens ignore them.
    """

    account: str
    account_key: str
    expiry: datetime
    container: str | None = None
    permissions: str = SAS_PERMISSIONS
    resource_types: str = SAS_RESOURCE_TYPES
    services: str = SAS_SERVICES

    @property
    def is_container_scoped(self) -> bool:
        return self.container is not None


class OutcomeStatus(Enum):
    ROTATED = auto()
    DRY_RUN = auto()
    SKIPPED = auto()
    FAILED = auto()


@dataclass
class RotationOutcome:
    """What happened to a single secret during a rotation run.

    A discovery failure (resource group or vault could not be listed) has an
    empty ``secret_name``; ``vault`` then names the group or vault.
    """

    vault: str
    secret_name: str
    status: OutcomeStatus
    kind: CredentialKind | None = None
    message: str = ""


@dataclass
class RotationReport:
    outcomes: list[RotationOutcome] = field(default_factory=list)

    def extend(self, outcomes: list[RotationOutcome]) -> None:
        self.outcomes.extend(outcomes)

    def with_status(self, status: OutcomeStatus) -> list[RotationOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def rotated(self) -> list[RotationOutcome]:
        return self.with_status(OutcomeStatus.ROTATED)

    @property
    def skipped(self) -> list[RotationOutcome]:
        return self.with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[RotationOutcome]:
        return self.with_status(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        """True when no secret failed. Skipped secrets do not count as failures."""
        return not self.failed
