"""Shared fixtures."""

import logging
from datetime import datetime, timezone

import pytest

from sasrotate.constants import APP_NAME
from sasrotate.models import SasRequest

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """Drop handlers added by configure_logging so tests don't leak streams."""
    yield
    logger = logging.getLogger(APP_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class FakeAzure:
    """Records key fetches and SAS requests; returns canned values."""

    def __init__(self, key: str = "K==", token: str = "sv=2020&sig=abc") -> None:
        self.key = key
        self.token = token
        self.key_calls: list[str] = []
        self.sas_requests: list[SasRequest] = []

    def fetch_account_key(self, account: str) -> str:
        self.key_calls.append(account)
        return self.key

    def sign_sas(self, request: SasRequest) -> str:
        self.sas_requests.append(request)
        return self.token


@pytest.fixture
def fake_azure() -> FakeAzure:
    return FakeAzure()
