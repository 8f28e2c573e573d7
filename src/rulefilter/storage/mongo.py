from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

logger = logging.getLogger("rulefilter.storage.mongo")


class MongoQueryable:
    """Queryable over a pymongo ``Collection`` (or anything with the same API, e.g. mongomock).

    The collection is injected; this class never opens connections itself.

    Args:
        collection: target collection.
        id_field: primary-key field used by :meth:`contains`.
        projection: optional projection passed to ``find``.
    """

    def __init__(
        self,
        collection: Any,
        *,
        id_field: str = "_id",
        projection: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not hasattr(collection, "find") or not hasattr(collection, "count_documents"):
            raise TypeError("collection must provide find() and count_documents()")
        self.collection = collection
        self.id_field = id_field
        self.projection = projection

    @classmethod
    def from_uri(
        cls,
        uri: str,
        database: str,
        collection: str,
        *,
        client_params: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> "MongoQueryable":
        """
        Build a queryable from a connection string with short server-selection
        and socket timeouts by default. Extra ``MongoClient`` arguments go in
        ``client_params``.
        """
        try:
            from pymongo import MongoClient  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "MongoQueryable.from_uri requires pymongo. "
                "Install with: pip install rulefilter[mongo]"
            ) from e

        params: Dict[str, Any] = {"serverSelectionTimeoutMS": 3000, "socketTimeoutMS": 8000}
        params.update(client_params or {})
        client = MongoClient(uri, **params)
        return cls(client[database][collection], **kwargs)

    def _name(self) -> str:
        return str(getattr(self.collection, "name", type(self.collection).__name__))

    def find(self, native_filter: Dict[str, Any]) -> List[Any]:
        if not isinstance(native_filter, Mapping):
            raise TypeError(
                f"{type(self).__name__} expects a query document, got {type(native_filter).__name__}"
            )
        logger.debug("find on %s with %r", self._name(), native_filter)
        if self.projection is None:
            cursor = self.collection.find(dict(native_filter))
        else:
            cursor = self.collection.find(dict(native_filter), self.projection)
        return list(cursor)

    def contains(self, native_filter: Dict[str, Any], obj: Any) -> bool:
        """True when the record identified by *obj*'s id is selected by *native_filter*."""
        if isinstance(obj, Mapping):
            key = obj.get(self.id_field)
        else:
            key = getattr(obj, self.id_field, None)
        if key is None:
            # unsaved objects are never in the store
            logger.debug("contains on %s: object has no %s", self._name(), self.id_field)
            return False
        query = {"$and": [dict(native_filter), {self.id_field: key}]}
        return self.collection.count_documents(query, limit=1) > 0


__all__ = ["MongoQueryable"]
