# core/document_store.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from supabase import Client

from core.errors import AppError, NotFound, StoreUnavailable, extract_supabase_error
from core.logging_config import logger


# ============================================================
# Server timestamp sentinel
# ============================================================
class _ServerTimestamp:
    """Placeholder field value; the store writes its own clock in its place."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"

    # Copies must stay identical to the sentinel
    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


SERVER_TIMESTAMP = _ServerTimestamp()


def resolve_server_timestamps(fields: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        key: (now if value is SERVER_TIMESTAMP else value)
        for key, value in fields.items()
    }


# ============================================================
# Store interface
# ============================================================
class DocumentStore(Protocol):
    """
    Minimal document store used by every service.

    `set` is a full upsert, `update` a partial write that fails with
    NotFound when the document does not exist, and `delete` of a
    missing document is a no-op.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]: ...

    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]: ...

    def set(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...


# ============================================================
# Supabase implementation
# ============================================================
def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
    clean = {}
    for key, value in resolve_server_timestamps(fields).items():
        if isinstance(value, datetime):
            value = value.isoformat()
        clean[key] = value
    return clean


class SupabaseDocumentStore:
    """DocumentStore over Supabase tables (PostgREST)."""

    def __init__(self, client: Optional[Client]):
        self._client = client

    def _table(self, collection: str):
        if self._client is None:
            raise StoreUnavailable("Supabase client not configured")
        return self._client.table(collection)

    @staticmethod
    def _unavailable(error: Exception, operation: str) -> StoreUnavailable:
        detail = extract_supabase_error(error)
        logger.error(f"{operation}: {detail}")
        return StoreUnavailable(f"{operation}: {detail}")

    def get(self, collection, doc_id):
        try:
            result = (
                self._table(collection)
                .select("*")
                .eq("id", doc_id)
                .limit(1)
                .execute()
            )
        except AppError:
            raise
        except Exception as e:
            raise self._unavailable(e, f"Failed to fetch {collection}/{doc_id}")

        rows = result.data or []
        return rows[0] if rows else None

    def query(self, collection, filters=None, order_by=None, descending=True):
        try:
            query = self._table(collection).select("*")
            for key, val in (filters or {}).items():
                query = query.eq(key, str(val))
            if order_by:
                query = query.order(order_by, desc=descending)
            result = query.execute()
        except AppError:
            raise
        except Exception as e:
            raise self._unavailable(e, f"Failed to query {collection}")

        return result.data or []

    def set(self, collection, doc_id, fields):
        payload = _serialize({**fields, "id": doc_id})
        try:
            self._table(collection).upsert(payload, on_conflict="id").execute()
        except AppError:
            raise
        except Exception as e:
            raise self._unavailable(e, f"Failed to write {collection}/{doc_id}")

    def update(self, collection, doc_id, fields):
        try:
            result = (
                self._table(collection)
                .update(_serialize(fields), returning="representation")
                .eq("id", doc_id)
                .execute()
            )
        except AppError:
            raise
        except Exception as e:
            raise self._unavailable(e, f"Failed to update {collection}/{doc_id}")

        if not result.data:
            raise NotFound(collection, doc_id)

    def delete(self, collection, doc_id):
        try:
            self._table(collection).delete().eq("id", doc_id).execute()
        except AppError:
            raise
        except Exception as e:
            raise self._unavailable(e, f"Failed to delete {collection}/{doc_id}")
