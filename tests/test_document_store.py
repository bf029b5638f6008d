# tests/test_document_store.py

"""
Tests for the server timestamp sentinel.
"""

import copy
from datetime import datetime, timezone

from core.document_store import SERVER_TIMESTAMP, resolve_server_timestamps


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_sentinel_survives_copies():
    assert copy.copy(SERVER_TIMESTAMP) is SERVER_TIMESTAMP
    assert copy.deepcopy(SERVER_TIMESTAMP) is SERVER_TIMESTAMP


def test_copied_fields_still_resolve():
    fields = copy.deepcopy({"status": "new", "created_at": SERVER_TIMESTAMP})

    resolved = resolve_server_timestamps(fields, now=NOW)

    assert resolved == {"status": "new", "created_at": NOW}


def test_profile_written_through_store_reads_back(store, users, make_user):
    user_id = make_user("client@clinic.com")

    assert isinstance(store.get("users", user_id)["created_at"], datetime)
    assert users.require_user(user_id).email == "client@clinic.com"
