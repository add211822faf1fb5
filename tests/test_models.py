"""Unit tests for domain models."""

import dataclasses

import pytest

from conftest import FIXED_NOW
from sasrotate.models import (
    CredentialKind,
    OutcomeStatus,
    RotationOutcome,
    RotationReport,
    SasRequest,
    SecretDescriptor,
    SecretNameError,
    UnexpectedContainerError,
    UnrecognizedKindError,
)


class TestCredentialKind:
    def test_labels_match_secret_suffixes(self):
        """
        Given the CredentialKind enum
        When listing its values
        Then they are exactly the four secret name suffixes
        """
        assert {k.value for k in CredentialKind} == {
            "accountConnStr",
            "accountKey",
            "sasToken",
            "sasUri",
        }

    def test_account_scoped_kinds(self):
        """
        Given each kind
        When checking is_account_scoped
        Then only the key and connection string are account-scoped
        """
        scoped = {k for k in CredentialKind if k.is_account_scoped}
        assert scoped == {CredentialKind.ACCOUNT_KEY, CredentialKind.ACCOUNT_CONN_STR}

    def test_from_label_exact_match(self):
        """
        Given the label sasUri
        When from_label is called
        Then SAS_URI is returned
        """
        assert CredentialKind.from_label("sasUri") is CredentialKind.SAS_URI

    def test_from_label_unknown_lists_supported_kinds(self):
        """
        Given an unknown label
        When from_label is called
        Then the error lists every supported suffix
        """
        with pytest.raises(UnrecognizedKindError) as info:
            CredentialKind.from_label("password")
        message = str(info.value)
        assert "accountConnStr, accountKey, sasToken, sasUri" in message
        assert "found: password" in message


class TestSecretDescriptor:
    def test_is_immutable(self):
        """
        Given a descriptor
        When assigning to a field
        Then FrozenInstanceError is raised
        """
        descriptor = SecretDescriptor("acct", CredentialKind.SAS_TOKEN)
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.container = "data"  # type: ignore[misc]

    def test_account_scoped_with_container_is_not_constructible(self):
        """
        Given an accountKey kind and a container
        When constructing a descriptor
        Then UnexpectedContainerError is raised
        """
        with pytest.raises(UnexpectedContainerError):
            SecretDescriptor("acct", CredentialKind.ACCOUNT_KEY, container="data")

    def test_secret_name_without_container(self):
        """
        Given an account-scoped descriptor
        When reading secret_name
        Then it is <account>-<kind>
        """
        assert SecretDescriptor("acct", CredentialKind.ACCOUNT_KEY).secret_name == "acct-accountKey"

    @pytest.mark.parametrize("kind", list(CredentialKind))
    def test_hyphenated_account_is_not_constructible(self, kind):
        """
        Given a storage account containing a hyphen
        When constructing a descriptor of any kind
        Then SecretNameError is raised
        """
        with pytest.raises(SecretNameError, match="acct-x"):
            SecretDescriptor("acct-x", kind)


class TestSasRequest:
    def test_defaults_are_full_permission_set(self):
        """
        Given a request built with only account, key and expiry
        When reading the signing parameters
        Then they are the fixed cdlruwap / sco / bfqt set
        """
        request = SasRequest(account="acct", account_key="k", expiry=FIXED_NOW)
        assert (request.permissions, request.resource_types, request.services) == (
            "cdlruwap",
            "sco",
            "bfqt",
        )
        assert request.is_container_scoped is False


SAS_TOKEN = CredentialKind.SAS_TOKEN
ACCOUNT_KEY = CredentialKind.ACCOUNT_KEY


class TestRotationReport:
    def _report(self) -> RotationReport:
        return RotationReport(
            [
                RotationOutcome("kv", "a-sasToken", OutcomeStatus.ROTATED, SAS_TOKEN),
                RotationOutcome("kv", "a-foo", OutcomeStatus.SKIPPED, message="bad"),
                RotationOutcome("kv", "b-accountKey", OutcomeStatus.FAILED, ACCOUNT_KEY),
            ]
        )

    def test_status_views(self):
        """
        Given a report with one outcome of each status
        When reading rotated, skipped and failed
        Then each view holds only its own outcome
        """
        report = self._report()
        assert [o.secret_name for o in report.rotated] == ["a-sasToken"]
        assert [o.secret_name for o in report.skipped] == ["a-foo"]
        assert [o.secret_name for o in report.failed] == ["b-accountKey"]

    def test_ok_is_false_with_failures(self):
        """
        Given a report containing a failure
        When reading ok
        Then it is False
        """
        assert self._report().ok is False

    def test_skips_do_not_break_ok(self):
        """
        Given a report with only skipped and rotated outcomes
        When reading ok
        Then it is True
        """
        report = RotationReport([RotationOutcome("kv", "a-foo", OutcomeStatus.SKIPPED)])
        assert report.ok is True
