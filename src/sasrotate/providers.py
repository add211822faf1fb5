"""Rotation backend protocol and the in-memory implementation."""

import hashlib
from dataclasses import dataclass, field
from typing import Protocol

from sasrotate.azure.client import AzureClientError
from sasrotate.constants import MOCK_DATA, SAS_EXPIRY_FORMAT
from sasrotate.models import SasRequest


class RotationBackend(Protocol):
    """Protocol that all control-plane backends must satisfy.

    ``AzureClient`` satisfies it by shelling out to ``az``; ``MockBackend``
    keeps everything in memory.
    """

    def group_exists(self, resource_group: str) -> bool: ...

    def list_key_vaults(self, resource_group: str) -> list[str]: ...

    def list_secret_names(self, vault_name: str, prefix: str) -> list[str]:
        """Return the vault's secret names that start with ``prefix``."""
        ...

    def get_account_key(self, resource_group: str, account: str) -> str:
        """Return the primary access key of a storage account."""
        ...

    def generate_sas(self, request: SasRequest) -> str:
        """Return a signed SAS token (query string without the leading ``?``)."""
        ...

    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        """Create or update a secret."""
        ...


@dataclass
class MockResourceGroup:
    """A resource group as seen by ``MockBackend``.

    ``vaults`` maps vault name -> secret name -> value; ``accounts`` maps
    storage account name -> primary key.
    """

    vaults: dict[str, dict[str, str]] = field(default_factory=dict)
    accounts: dict[str, str] = field(default_factory=dict)


class MockBackend:
    """In-memory backend for rehearsals and tests.

    Seeded from ``MOCK_DATA`` when no groups are given. SAS tokens are
    derived deterministically from the request so repeated runs produce
    stable output. Writes go into the vault dicts in place, and
    every upload is also appended to ``uploads``.
    """

    def __init__(self, groups: dict[str, MockResourceGroup] | None = None) -> None:
        if groups is None:
            groups = {
                name: MockResourceGroup(
                    vaults={vault: dict(secrets) for vault, secrets in data["vaults"].items()},
                    accounts=dict(data["accounts"]),
                )
                for name, data in MOCK_DATA.items()
            }
        self._groups = groups
        self.uploads: list[tuple[str, str, str]] = []

    def group_exists(self, resource_group: str) -> bool:
        return resource_group in self._groups

    def list_key_vaults(self, resource_group: str) -> list[str]:
        return list(self._group(resource_group).vaults)

    def list_secret_names(self, vault_name: str, prefix: str) -> list[str]:
        return [name for name in self._vault(vault_name) if name.startswith(prefix)]

    def get_account_key(self, resource_group: str, account: str) -> str:
        try:
            return self._group(resource_group).accounts[account]
        except KeyError:
            raise AzureClientError(
                f"Storage account '{account}' not found in '{resource_group}'"
            ) from None

    def generate_sas(self, request: SasRequest) -> str:
        expiry = request.expiry.strftime(SAS_EXPIRY_FORMAT)
        scope = request.container or request.account
        digest = hashlib.sha256(f"{request.account_key}:{scope}:{expiry}".encode()).hexdigest()
        params = [f"se={expiry}", f"sp={request.permissions}"]
        if request.is_container_scoped:
            params.append("sr=c")
        else:
            params += [f"srt={request.resource_types}", f"ss={request.services}"]
        params.append(f"sig={digest[:32]}")
        return "&".join(params)

    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        self._vault(vault_name)[name] = value
        self.uploads.append((vault_name, name, value))

    def _group(self, resource_group: str) -> MockResourceGroup:
        try:
            return self._groups[resource_group]
        except KeyError:
            raise AzureClientError(f"Resource group '{resource_group}' not found") from None

    def _vault(self, vault_name: str) -> dict[str, str]:
        for group in self._groups.values():
            if vault_name in group.vaults:
                return group.vaults[vault_name]
        raise AzureClientError(f"Key Vault '{vault_name}' not found")
