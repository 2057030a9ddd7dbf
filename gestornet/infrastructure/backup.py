"""JSON backup export and atomic restore"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from gestornet.domain.codes import parse_code
from gestornet.domain.exceptions import BackupError, BackupRestoreError, InvalidCodeFormatError
from gestornet.domain.models import CLIENTS, MANAGERS, TRANSACTIONS, Client, Manager, Transaction
from gestornet.infrastructure.database.repositories import DocumentStore
from gestornet.infrastructure.observability.metrics import backup_counter

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


class BackupDocument(BaseModel):
    """Backup file layout; all three arrays are mandatory"""

    model_config = ConfigDict(extra="ignore")

    version: int = BACKUP_VERSION
    exportedAt: Optional[str] = None
    managers: List[Dict[str, Any]]
    clients: List[Dict[str, Any]]
    transactions: List[Dict[str, Any]]


def export_backup(store: DocumentStore) -> Dict[str, Any]:
    """Snapshot managers, clients and transactions from the store"""
    try:
        document = {
            "version": BACKUP_VERSION,
            "exportedAt": datetime.now(timezone.utc).isoformat(),
            "managers": store.get_all(MANAGERS),
            "clients": store.get_all(CLIENTS),
            "transactions": store.get_all(TRANSACTIONS),
        }
    except Exception:
        backup_counter.labels(operation="export", outcome="failure").inc()
        raise
    backup_counter.labels(operation="export", outcome="success").inc()
    return document


def parse_backup(raw: Union[str, bytes, Dict[str, Any]]) -> BackupDocument:
    """
    Validate a backup payload.

    Every record must load as its entity, exactly as the app reads it back
    after the restore; client codes must parse.

    Raises:
        BackupError: not JSON, an array is missing/malformed, or a record is unreadable
    """
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        document = BackupDocument.model_validate(data)
    except (ValueError, TypeError, PydanticValidationError) as e:
        raise BackupError(f"Invalid backup file: {e}") from e

    for name, entity, records in (
        (MANAGERS, Manager, document.managers),
        (CLIENTS, Client, document.clients),
        (TRANSACTIONS, Transaction, document.transactions),
    ):
        for index, record in enumerate(records):
            try:
                loaded = entity.from_record(record)
                if entity is Client:
                    parse_code(loaded.code)
            except (KeyError, ValueError, TypeError, AttributeError, InvalidCodeFormatError) as e:
                raise BackupError(f"Invalid backup file: {name}[{index}] is unreadable ({e!r})") from e
    return document


def restore_backup(store: DocumentStore, raw: Union[str, bytes, Dict[str, Any]]) -> BackupDocument:
    """
    Replace managers, clients and transactions with the backup contents.

    The three collections are replaced in one database transaction; a failure
    leaves the store exactly as it was.
    """
    try:
        document = parse_backup(raw)
    except BackupError:
        backup_counter.labels(operation="restore", outcome="failure").inc()
        raise

    try:
        store.replace_collections(
            {
                MANAGERS: document.managers,
                CLIENTS: document.clients,
                TRANSACTIONS: document.transactions,
            }
        )
    except Exception as e:
        backup_counter.labels(operation="restore", outcome="failure").inc()
        logger.error(f"Backup restore failed: {e}")
        raise BackupRestoreError("Backup restore failed; no data was changed") from e

    backup_counter.labels(operation="restore", outcome="success").inc()
    logger.info(
        "Backup restored",
        extra={
            "managers": len(document.managers),
            "clients": len(document.clients),
            "transactions": len(document.transactions),
        },
    )
    return document
