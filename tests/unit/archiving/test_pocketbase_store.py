"""Tests for PocketBaseConfigStore with a mocked PocketBase client."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from archiving.errors import CollaboratorIOError
from archiving.models import ActiveRecord, PendingRecord, SamplingMethod
from archiving.stores import PocketBaseConfigStore


def _not_found() -> ClientResponseError:
    return ClientResponseError("not found", status=404)


def _server_error() -> ClientResponseError:
    return ClientResponseError("boom", status=500)


@pytest.fixture
def collections():
    """One mock per collection name."""
    mocks: dict[str, Mock] = {}

    def _collection(name: str) -> Mock:
        if name not in mocks:
            mocks[name] = Mock()
        return mocks[name]

    return mocks, _collection


@pytest.fixture
def store(collections):
    _, collection = collections
    pb = Mock()
    pb.collection = Mock(side_effect=collection)
    return PocketBaseConfigStore(pb, default_standard_fields=["HIHI", "LOLO"])


class TestGetActiveRecord:
    def test_maps_type_info(self, store, collections):
        mocks, collection = collections
        collection("pv_type_info").get_first_list_item.return_value = Mock(
            id="rec1",
            pv_name="SRC",
            archive_fields=["HIHI"],
            modification_time="2025-06-01T12:00:00Z",
        )

        record = store.get_active_record("SRC")

        assert record.id == "rec1"
        assert record.archive_fields == {"HIHI"}
        assert record.modification_time == datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
        mocks["pv_type_info"].get_first_list_item.assert_called_once_with('pv_name = "SRC"')

    def test_not_found_returns_none(self, store, collections):
        _, collection = collections
        collection("pv_type_info").get_first_list_item.side_effect = _not_found()

        assert store.get_active_record("SRC") is None

    def test_server_error_raises_collaborator_error(self, store, collections):
        _, collection = collections
        collection("pv_type_info").get_first_list_item.side_effect = _server_error()

        with pytest.raises(CollaboratorIOError):
            store.get_active_record("SRC")

    def test_malformed_modification_time_raises_collaborator_error(self, store, collections):
        _, collection = collections
        collection("pv_type_info").get_first_list_item.return_value = Mock(
            id="rec1", pv_name="SRC", archive_fields=[], modification_time="yesterday"
        )

        with pytest.raises(CollaboratorIOError):
            store.get_active_record("SRC")


class TestUpdateActiveRecord:
    def test_updates_existing_record(self, store, collections):
        _, collection = collections
        record = ActiveRecord("SRC", {"LOLO", "HIHI"}, datetime(2025, 6, 1, tzinfo=UTC), id="rec1")

        store.update_active_record("SRC", record)

        collection("pv_type_info").update.assert_called_once_with(
            "rec1",
            {
                "pv_name": "SRC",
                "archive_fields": ["HIHI", "LOLO"],
                "modification_time": "2025-06-01T00:00:00+00:00",
            },
        )

    def test_creates_when_no_id(self, store, collections):
        _, collection = collections
        collection("pv_type_info").create.return_value = Mock(id="new1")
        record = ActiveRecord("SRC")

        store.update_active_record("SRC", record)

        assert record.id == "new1"


class TestAddAlias:
    def test_creates_new_alias(self, store, collections):
        _, collection = collections
        collection("pv_aliases").get_first_list_item.side_effect = _not_found()

        store.add_alias("A1", "SRC")

        collection("pv_aliases").create.assert_called_once_with({"alias": "A1", "pv_name": "SRC"})

    def test_existing_alias_for_same_pv_is_left_alone(self, store, collections):
        _, collection = collections
        collection("pv_aliases").get_first_list_item.return_value = Mock(id="al1", pv_name="SRC")

        store.add_alias("A1", "SRC")

        collection("pv_aliases").create.assert_not_called()
        collection("pv_aliases").update.assert_not_called()

    def test_alias_is_quoted_in_filter(self, store, collections):
        _, collection = collections
        collection("pv_aliases").get_first_list_item.side_effect = _not_found()

        store.add_alias('my "alias"', "SRC")

        collection("pv_aliases").get_first_list_item.assert_called_once_with('alias = "my \\"alias\\""')


class TestStandardFields:
    def test_reads_config_entry(self, store, collections):
        _, collection = collections
        collection("config").get_first_list_item.return_value = Mock(config_value="HIHI, HOPR ,")

        assert store.get_fields_archived_as_part_of_stream() == ["HIHI", "HOPR"]

    def test_missing_entry_uses_defaults(self, store, collections):
        _, collection = collections
        collection("config").get_first_list_item.side_effect = _not_found()

        assert store.get_fields_archived_as_part_of_stream() == ["HIHI", "LOLO"]

    def test_unreachable_store_raises(self, store, collections):
        _, collection = collections
        collection("config").get_first_list_item.side_effect = _server_error()

        with pytest.raises(CollaboratorIOError):
            store.get_fields_archived_as_part_of_stream()


class TestPersistArchiveRequest:
    def test_creates_request(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_first_list_item.side_effect = _not_found()
        record = PendingRecord(SamplingMethod.SCAN, 2.0, archive_fields={"HIHI"}, aliases=["A1"])

        store.persist_archive_request("SRC", record)

        collection("archive_requests").create.assert_called_once_with(
            {
                "pv_name": "SRC",
                "params": {
                    "sampling_method": "SCAN",
                    "sampling_period": 2.0,
                    "controlling_pv": None,
                    "policy_name": None,
                    "archive_fields": ["HIHI"],
                    "aliases": ["A1"],
                },
            }
        )

    def test_create_failure_raises(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_first_list_item.side_effect = _not_found()
        collection("archive_requests").create.side_effect = _server_error()

        with pytest.raises(CollaboratorIOError):
            store.persist_archive_request("SRC", PendingRecord())


class TestLoadArchiveRequests:
    def test_rebuilds_pending_records(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_full_list.return_value = [
            Mock(
                id="req1",
                pv_name="SRC",
                params={
                    "sampling_method": "SCAN",
                    "sampling_period": 2.0,
                    "controlling_pv": "GATE",
                    "policy_name": None,
                    "archive_fields": ["HIHI"],
                    "aliases": ["A1"],
                },
            )
        ]

        requests = store.load_archive_requests()

        assert requests == {
            "SRC": PendingRecord(SamplingMethod.SCAN, 2.0, "GATE", None, {"HIHI"}, ["A1"]),
        }

    def test_malformed_entry_is_skipped(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_full_list.return_value = [
            Mock(id="req1", pv_name="BAD", params={"sampling_method": "POLL"}),
            Mock(id="req2", pv_name="NOPARAMS", params=None),
            Mock(id="req3", pv_name="SRC", params={}),
        ]

        assert list(store.load_archive_requests()) == ["SRC"]

    def test_unreachable_store_raises(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_full_list.side_effect = _server_error()

        with pytest.raises(CollaboratorIOError):
            store.load_archive_requests()


class TestRemoveArchiveRequest:
    def test_deletes_existing_request(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_first_list_item.return_value = Mock(id="req1", pv_name="SRC")

        store.remove_archive_request("SRC")

        collection("archive_requests").delete.assert_called_once_with("req1")

    def test_missing_request_is_ignored(self, store, collections):
        _, collection = collections
        collection("archive_requests").get_first_list_item.side_effect = _not_found()

        store.remove_archive_request("SRC")

        collection("archive_requests").delete.assert_not_called()
