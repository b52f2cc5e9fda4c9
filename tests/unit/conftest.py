import pytest
from unittest.mock import AsyncMock, MagicMock
from tests.fixtures.fake_ledger_store import FakeLedgerStore


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def store():
    """In-memory customer/transaction store that counts writes"""
    return FakeLedgerStore()
