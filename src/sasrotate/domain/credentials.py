"""Credential material generation.

``generate_credential`` turns a decoded ``SecretDescriptor`` into the value
that should be stored in Key Vault.  It performs no I/O itself: the account
key and SAS signature come from the two callables passed in, which are
expected to hit the Azure control plane.  Their exceptions propagate
unchanged.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from sasrotate.constants import (
    BLOB_ENDPOINT_TEMPLATE,
    CONNECTION_STRING_TEMPLATE,
    SAS_EXPIRY_DAYS,
)
from sasrotate.models import CredentialKind, SasRequest, SecretDescriptor

AccountKeyFetcher = Callable[[str], str]
SasSigner = Callable[[SasRequest], str]


def connection_string(account: str, account_key: str) -> str:
    return CONNECTION_STRING_TEMPLATE.format(account=account, key=account_key)


def sas_uri(account: str, sas_token: str, container: str | None = None) -> str:
    """Return the blob endpoint URL for the account (or container) with the token appended."""
    base = BLOB_ENDPOINT_TEMPLATE.format(account=account)
    if container:
        base += container
    return f"{base}?{sas_token}"


def sas_expiry(now: datetime | None = None) -> datetime:
    """Return the expiry for a new SAS token, truncated to whole seconds in UTC."""
    if now is None:
        now = datetime.now(timezone.utc)
    return (now + timedelta(days=SAS_EXPIRY_DAYS)).replace(microsecond=0)


def build_sas_request(
    descriptor: SecretDescriptor, account_key: str, now: datetime | None = None
) -> SasRequest:
    return SasRequest(
        account=descriptor.storage_account,
        account_key=account_key,
        container=descriptor.container or None,
        expiry=sas_expiry(now),
    )


def generate_credential(
    descriptor: SecretDescriptor,
    fetch_account_key: AccountKeyFetcher,
    sign_sas: SasSigner,
    now: datetime | None = None,
) -> str:
    """Produce the secret value for ``descriptor``.

    The account key is fetched exactly once. SAS kinds build a signing
    request valid for three days with the full permission set, scoped to the
    container when the descriptor has one.
    """
    account = descriptor.storage_account
    account_key = fetch_account_key(account)

    if descriptor.kind is CredentialKind.ACCOUNT_KEY:
        return account_key
    if descriptor.kind is CredentialKind.ACCOUNT_CONN_STR:
        return connection_string(account, account_key)

    request = build_sas_request(descriptor, account_key, now)
    token = sign_sas(request)
    if descriptor.kind is CredentialKind.SAS_TOKEN:
        return token
    return sas_uri(account, token, request.container)
