"""Thin wrapper around the Azure CLI for the calls a rotation run needs.

All calls shell out to ``az`` so no Azure SDK dependency is required.  The
caller is responsible for ensuring ``az`` is authenticated (``az login`` or a
service principal in the environment).

Raises ``AzureClientError`` on any non-zero exit code.
"""

import json
import logging
import subprocess

from sasrotate.constants import KEY_VAULT_RESOURCE_TYPE, SAS_EXPIRY_FORMAT
from sasrotate.models import SasRequest

logger = logging.getLogger(__name__)


class AzureClientError(Exception):
    """Raised when an ``az`` CLI call returns a non-zero exit code."""


class AzureClient:
    """Shells out to the Azure CLI for resource discovery, keys, SAS and secrets.

    Args:
        subscription_id: Optional subscription to pass to every call. When
            omitted the CLI's active subscription is used.
    """

    def __init__(self, subscription_id: str | None = None) -> None:
        self._subscription = subscription_id

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def group_exists(self, resource_group: str) -> bool:
        """Return True if the resource group is currently deployed."""
        names = self._run_json(
            ["az", "group", "list", "--query", f"[?name == '{resource_group}'].name"]
        )
        return bool(names)

    def list_key_vaults(self, resource_group: str) -> list[str]:
        """Return the names of all Key Vaults in the resource group."""
        return self._run_json(
            [
                "az",
                "resource",
                "list",
                "--resource-group",
                resource_group,
                "--resource-type",
                KEY_VAULT_RESOURCE_TYPE,
                "--query",
                "[].name",
            ]
        )

    def list_secret_names(self, vault_name: str, prefix: str) -> list[str]:
        """Return the names of secrets in the vault that start with ``prefix``."""
        return self._run_json(
            [
                "az",
                "keyvault",
                "secret",
                "list",
                "--vault-name",
                vault_name,
                "--query",
                f"[?starts_with(name, '{prefix}')].name",
            ]
        )

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_account_key(self, resource_group: str, account: str) -> str:
        """Return the primary access key of a storage account."""
        return self._run_tsv(
            [
                "az",
                "storage",
                "account",
                "keys",
                "list",
                "--resource-group",
                resource_group,
                "--account-name",
                account,
                "--query",
                "[0].value",
            ]
        )

    def generate_sas(self, request: SasRequest) -> str:
        """Sign a SAS token for an account, or for one container when the request names it."""
        expiry = request.expiry.strftime(SAS_EXPIRY_FORMAT)
        if request.is_container_scoped:
            cmd = [
                "az",
                "storage",
                "container",
                "generate-sas",
                "--name",
                request.container,
                "--account-name",
                request.account,
                "--account-key",
                request.account_key,
                "--expiry",
                expiry,
                "--permissions",
                request.permissions,
            ]
        else:
            cmd = [
                "az",
                "storage",
                "account",
                "generate-sas",
                "--account-name",
                request.account,
                "--account-key",
                request.account_key,
                "--expiry",
                expiry,
                "--permissions",
                request.permissions,
                "--resource-types",
                request.resource_types,
                "--services",
                request.services,
            ]
        return self._run_tsv(cmd)

    # ------------------------------------------------------------------
    # Key Vault
    # ------------------------------------------------------------------

    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        """Create or update a secret."""
        self._run(
            [
                "az",
                "keyvault",
                "secret",
                "set",
                "--vault-name",
                vault_name,
                "--name",
                name,
                "--value",
                value,
                "--output",
                "none",
            ]
        )

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _run_json(self, cmd: list[str]) -> list[str]:
        result = self._run([*cmd, "--output", "json"])
        try:
            values: list[str] = json.loads(result or "[]")
        except json.JSONDecodeError as exc:
            raise AzureClientError(f"Unexpected non-JSON output from {cmd[:3]}: {exc}") from exc
        return values

    def _run_tsv(self, cmd: list[str]) -> str:
        result = self._run([*cmd, "--output", "tsv"])
        # tsv output appends a trailing newline of its own; remove exactly one.
        return result.removesuffix("\n")

    def _run(self, cmd: list[str]) -> str:
        """Run a command, returning stdout. Raises AzureClientError on failure."""
        # SAS signing happens locally from the account key; it takes no subscription.
        if self._subscription and "generate-sas" not in cmd:
            cmd = [*cmd, "--subscription", self._subscription]
        logger.debug("Running: %s", " ".join(cmd[:4]))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            raise AzureClientError(f"Could not run {cmd[0]}: {exc}") from exc
        if result.returncode != 0:
            raise AzureClientError(
                f"Command failed (exit {result.returncode}):\n"
                f"  {_redact(cmd)}\n"
                f"  stderr: {result.stderr.strip()}"
            )
        return result.stdout


_SENSITIVE_FLAGS = ("--account-key", "--value")


def _redact(cmd: list[str]) -> str:
    """Join a command for display, masking the values of sensitive flags."""
    shown: list[str] = []
    hide_next = False
    for part in cmd:
        shown.append("***" if hide_next else part)
        hide_next = part in _SENSITIVE_FLAGS
    return " ".join(shown)
