"""Pytest fixtures for workflow use case tests."""

from __future__ import annotations

import pytest

from tests.fixtures import GatedLedgerClient


@pytest.fixture
def gated_ledger() -> GatedLedgerClient:
    return GatedLedgerClient()
