"""Rotation run: walk resource groups, regenerate credentials, write them back.

Every secret is handled on its own: a bad name or a failed ``az`` call is
logged as a warning and the run moves on to the next secret.  Nothing is
uploaded for a secret unless its credential was generated in full.
"""

import functools
import logging
from datetime import datetime

from sasrotate.azure.client import AzureClientError
from sasrotate.config import RotationConfig
from sasrotate.domain.credentials import generate_credential
from sasrotate.domain.secrets import SEPARATOR, decode_secret_name, split_secret_name
from sasrotate.logs import OutputMode, log_group
from sasrotate.models import (
    OutcomeStatus,
    RotationOutcome,
    RotationReport,
    SecretNameError,
)
from sasrotate.providers import RotationBackend

logger = logging.getLogger(__name__)


class Rotator:
    """Rotates every matching secret in the configured resource groups.

    Args:
        backend: Control-plane access (``AzureClient`` or ``MockBackend``).
        config: Resource groups and secret name prefix to work on.
        dry_run: Generate credentials but skip the upload.
        output: Controls how resource-group sections are rendered in the log.
        now: Fixed clock for SAS expiry; defaults to the current time per call.
    """

    def __init__(
        self,
        backend: RotationBackend,
        config: RotationConfig,
        dry_run: bool = False,
        output: OutputMode = "pipeline",
        now: datetime | None = None,
    ) -> None:
        self._backend = backend
        self._config = config
        self._dry_run = dry_run
        self._output = output
        self._now = now

    def run(self) -> RotationReport:
        report = RotationReport()
        for resource_group in self._config.resource_groups:
            with log_group(logger, f"Working in Resource Group: {resource_group}", self._output):
                report.extend(self.rotate_resource_group(resource_group))
        logger.info(
            "Rotation finished: %d rotated, %d dry run, %d skipped, %d failed",
            len(report.rotated),
            len(report.with_status(OutcomeStatus.DRY_RUN)),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def rotate_resource_group(self, resource_group: str) -> list[RotationOutcome]:
        """Rotate the prefixed secrets of every Key Vault in one resource group.

        Missing resource groups and empty vaults are not errors; they produce
        no outcomes.  A failing discovery call is recorded as a FAILED outcome with an
        empty secret name and ends the work for this group only.
        """
        try:
            if not self._backend.group_exists(resource_group):
                logger.info("Resource Group not found")
                return []
            vaults = self._backend.list_key_vaults(resource_group)
        except AzureClientError as exc:
            logger.warning("Could not inspect resource group %s: %s", resource_group, exc)
            return [RotationOutcome(resource_group, "", OutcomeStatus.FAILED, message=str(exc))]

        if not vaults:
            logger.warning("No Key Vaults found in %s", resource_group)
            return []

        outcomes: list[RotationOutcome] = []
        for vault in vaults:
            logger.info("Found Key Vault: %s", vault)
            outcomes.extend(self._rotate_vault(resource_group, vault))
        return outcomes

    def _rotate_vault(self, resource_group: str, vault: str) -> list[RotationOutcome]:
        prefix = self._config.secret_prefix
        logger.info("Retrieving secret names in KV that contain %s", prefix)
        try:
            names = self._backend.list_secret_names(vault, prefix)
        except AzureClientError as exc:
            logger.warning("Could not list secrets in %s: %s", vault, exc)
            return [RotationOutcome(vault, "", OutcomeStatus.FAILED, message=str(exc))]

        if not names:
            logger.warning("No Secrets found in Key Vault that contain %s", prefix)
            return []

        return [self.rotate_secret(resource_group, vault, name) for name in names]

    def rotate_secret(self, resource_group: str, vault: str, name: str) -> RotationOutcome:
        """Decode, regenerate and upload a single secret."""
        logger.info("Found Secret: %s", name)

        if name.count(SEPARATOR) > 2:
            logger.info(
                "Assuming secret includes a container name which uses a hyphen. "
                "Rebuilt identifiers: %s",
                ", ".join(split_secret_name(name)),
            )

        try:
            descriptor = decode_secret_name(name)
        except SecretNameError as exc:
            logger.warning("%s. Skipping", exc)
            return RotationOutcome(vault, name, OutcomeStatus.SKIPPED, message=str(exc))

        kind = descriptor.kind
        scope = " for container" if descriptor.container else ""
        logger.info("Generating %s%s", kind.value, scope)

        try:
            value = generate_credential(
                descriptor,
                functools.partial(self._backend.get_account_key, resource_group),
                self._backend.generate_sas,
                now=self._now,
            )
        except AzureClientError as exc:
            logger.warning("Could not generate %s for %s: %s", kind.value, name, exc)
            return RotationOutcome(vault, name, OutcomeStatus.FAILED, kind, str(exc))

        if self._dry_run:
            logger.info("Dry run: not uploading %s to %s", kind.value, name)
            return RotationOutcome(vault, name, OutcomeStatus.DRY_RUN, kind)

        try:
            self._backend.set_secret(vault, name, value)
        except AzureClientError as exc:
            logger.warning("Could not upload %s to %s", kind.value, name)
            return RotationOutcome(vault, name, OutcomeStatus.FAILED, kind, str(exc))

        logger.info("Uploaded %s to %s successfully", kind.value, name)
        return RotationOutcome(vault, name, OutcomeStatus.ROTATED, kind)
