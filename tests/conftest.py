"""
Test configuration and fixtures for SubTrack.

Provides shared mock collaborators for unit and integration tests.
"""

import pytest
from unittest.mock import AsyncMock

from subtrack.domain.interfaces import SendResult


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_store():
    """Mock SubscriptionStore with empty results."""
    mock = AsyncMock()
    mock.find_due_for_renewal = AsyncMock(return_value=[])
    mock.find_subscriptions_to_notify = AsyncMock(return_value=[])
    mock.update_many = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_users():
    """Mock UserDirectory that knows nobody."""
    mock = AsyncMock()
    mock.find_by_id = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_sender():
    """Mock NotificationSender that always succeeds."""
    mock = AsyncMock()
    mock.notify_renewal = AsyncMock(return_value=SendResult(message_id="email-id"))
    return mock
