"""Data access layer: key-value record collections over SQLAlchemy"""

import copy
from typing import Any, Dict, List, Mapping
from sqlalchemy.orm import Session, sessionmaker
from gestornet.domain.models import COLLECTIONS
from gestornet.infrastructure.database.models import StoredRecord


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


class DocumentStore:
    """
    Repository implementing the collection contract used by the domain layer.

    Every call runs in its own database transaction, so the store can be used
    from the writer thread and from request threads alike.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_all(self, collection: str) -> List[Dict[str, Any]]:
        """Fetch every record of a collection"""
        _check_collection(collection)
        with self.session_factory() as db:
            rows = (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection)
                .all()
            )
            return [copy.deepcopy(row.payload) for row in rows]

    def put(self, collection: str, record: Dict[str, Any]) -> None:
        """Upsert a record by its id"""
        _check_collection(collection)
        with self.session_factory() as db:
            self._upsert(db, collection, record)
            db.commit()

    def remove(self, collection: str, record_id: str) -> None:
        """Delete a record by id; no-op if absent"""
        _check_collection(collection)
        with self.session_factory() as db:
            (
                db.query(StoredRecord)
                .filter(StoredRecord.collection == collection, StoredRecord.record_id == str(record_id))
                .delete()
            )
            db.commit()

    def replace_all(self, collection: str, records: List[Dict[str, Any]]) -> None:
        """Clear a collection then bulk-insert, atomically"""
        self.replace_collections({collection: records})

    def replace_collections(self, collections: Mapping[str, List[Dict[str, Any]]]) -> None:
        """
        Replace several collections in a single transaction.

        Either every collection is replaced or, on any error, none is.
        """
        for collection in collections:
            _check_collection(collection)

        with self.session_factory() as db:
            try:
                for collection, records in collections.items():
                    db.query(StoredRecord).filter(StoredRecord.collection == collection).delete()
                    for record in records:
                        self._upsert(db, collection, record)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def _upsert(self, db: Session, collection: str, record: Dict[str, Any]) -> None:
        record_id = str(record["id"])
        row = db.get(StoredRecord, (collection, record_id))
        payload = copy.deepcopy(record)
        if row is None:
            db.add(StoredRecord(collection=collection, record_id=record_id, payload=payload))
        else:
            row.payload = payload
        db.flush()  # Surface integrity errors inside the transaction
