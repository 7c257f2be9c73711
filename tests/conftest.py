"""
Root test configuration and fixtures for the archive management service.

Provides:
- automatic PocketBase mocking so no test reaches a real server
- in-memory collaborators (config store, workflow queue, engine) for the
  admission pipeline

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from archiving.admission import ArchivePVService, PolicyResolver  # noqa: E402
from archiving.models import ActiveRecord  # noqa: E402
from archiving.stores import InMemoryConfigStore  # noqa: E402
from archiving.workflow import WorkflowQueue  # noqa: E402

STANDARD_FIELDS = ["HIHI", "HIGH", "LOW", "LOLO", "LOPR", "HOPR"]


def create_mock_pocketbase():
    """Create a mock PocketBase instance."""
    mock_pb = Mock()

    mock_collection = Mock()
    mock_collection.auth_with_password = Mock(return_value=True)
    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_first_list_item = Mock()
    mock_collection.create = Mock(return_value=Mock(id="mock-id"))
    mock_collection.update = Mock()
    mock_collection.delete = Mock()

    mock_pb.collection = Mock(return_value=mock_collection)

    mock_pb.auth_store = Mock()
    mock_pb.auth_store.base_token = "mock-token"

    return mock_pb


@pytest.fixture
def mock_pocketbase():
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture(autouse=True)
def mock_all_external_services():
    """Automatically mock PocketBase to prevent real connections.

    Integration runs can set SKIP_MOCKING=true to talk to a real server.
    """
    if os.environ.get("SKIP_MOCKING") == "true":
        yield {}
        return

    mock_pb = create_mock_pocketbase()
    with patch("pocketbase.PocketBase") as mock_pb_class:
        mock_pb_class.return_value = mock_pb
        yield {"pocketbase": mock_pb}


# =============================================================================
# Admission Fixtures
# =============================================================================


@pytest.fixture
def config_store() -> InMemoryConfigStore:
    """Config store knowing the standard fields and no PVs."""
    return InMemoryConfigStore(standard_fields=STANDARD_FIELDS)


@pytest.fixture
def workflow_queue(config_store: InMemoryConfigStore) -> WorkflowQueue:
    return WorkflowQueue(config_store)


@pytest.fixture
def engine() -> Mock:
    """Engine double recording start_pv_workflow calls."""
    return Mock()


@pytest.fixture
def archive_service(config_store, workflow_queue, engine) -> ArchivePVService:
    return ArchivePVService(
        config_store=config_store,
        workflow_queue=workflow_queue,
        engine=engine,
        policy_resolver=PolicyResolver(default_monitor_sampling_period=1.0, minimum_sampling_period=0.1),
    )


@pytest.fixture
def make_active(config_store):
    """Mark a PV as already archiving with the given fields."""

    def _make_active(pv_name: str, fields: set[str] | None = None) -> ActiveRecord:
        record = ActiveRecord(pv_name=pv_name, archive_fields=set(fields or ()))
        config_store.update_active_record(pv_name, record)
        return record

    return _make_active
