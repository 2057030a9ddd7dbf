"""Single-writer queue pushing in-memory mutations to the document store"""

import queue
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional
from gestornet.infrastructure.database.repositories import DocumentStore
from gestornet.infrastructure.observability.logging import log_persistence_failure
from gestornet.infrastructure.observability.metrics import persistence_failure_counter


@dataclass
class WriteCommand:
    """One queued write: put (record set) or remove (record_id set)"""

    operation: str  # "put" or "remove"
    collection: str
    record: Optional[Dict[str, Any]] = None
    record_id: Optional[str] = None


_STOP = object()


class StoreWriter:
    """
    Write-through channel to the store.

    Callers update their in-memory state first, then enqueue the write and
    return without waiting. A single worker thread applies commands in FIFO
    order, so writes for the same record land in call order. A failed write is
    logged and counted, never raised: until it is retried by a later write the
    store lags behind memory.

    With background=False writes are applied inline on the caller's thread,
    with the same failure handling.
    """

    def __init__(self, store: DocumentStore, background: bool = True):
        self.store = store
        self.background = background
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    def start(self) -> None:
        if not self.background:
            return
        with self._start_lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._run, name="gestornet-store-writer", daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Drain pending writes and stop the worker"""
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join()
        self._thread = None

    def flush(self) -> None:
        """Block until every queued write has been applied (or has failed)"""
        if self.background and self._thread is not None:
            self._queue.join()

    def put(self, collection: str, record: Dict[str, Any]) -> None:
        self._submit(WriteCommand(operation="put", collection=collection, record=record))

    def remove(self, collection: str, record_id: str) -> None:
        self._submit(WriteCommand(operation="remove", collection=collection, record_id=record_id))

    def _submit(self, command: WriteCommand) -> None:
        if not self.background:
            self._apply(command)
            return
        self.start()
        self._queue.put(command)

    def _run(self) -> None:
        while True:
            command = self._queue.get()
            try:
                if command is _STOP:
                    return
                self._apply(command)
            finally:
                self._queue.task_done()

    def _apply(self, command: WriteCommand) -> None:
        try:
            if command.operation == "put":
                self.store.put(command.collection, command.record)
            else:
                self.store.remove(command.collection, command.record_id)
        except Exception as e:
            record_id = command.record_id or (command.record or {}).get("id")
            persistence_failure_counter.labels(collection=command.collection).inc()
            log_persistence_failure(command.operation, command.collection, record_id, e)
