"""
In-memory cache of the leasable models listed by the registry contract.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, TYPE_CHECKING

from .exceptions import RegistryRefreshError
from .models import Model, ModelRegistrySnapshot

if TYPE_CHECKING:
    from .ledger import LedgerClient


class ModelRegistryCache:
    """
    Holds the current ``ModelRegistrySnapshot``.

    The snapshot is only ever replaced wholesale by ``refresh()``; a failed
    refresh leaves the previous snapshot in place. Every other component
    treats the snapshot as read-only.
    """

    def __init__(self, max_workers: int = 1, logger: Optional[logging.Logger] = None):
        """
        Args:
            max_workers: Number of concurrent ``getModel`` reads during refresh
                (1 reads sequentially)
            logger: Optional logger instance to use for debug/info logging
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)
        self._snapshot = ModelRegistrySnapshot()
        self._lock = threading.RLock()

    @property
    def snapshot(self) -> ModelRegistrySnapshot:
        with self._lock:
            return self._snapshot

    def get(self, model_id: int) -> Optional[Model]:
        return self.snapshot.get(model_id)

    def refresh(self, ledger: "LedgerClient") -> ModelRegistrySnapshot:
        """
        Re-read every model from the ledger and publish a new snapshot

        Args:
            ledger: Ledger client to read from

        Returns:
            The newly published snapshot

        Raises:
            RegistryRefreshError: If the count or any model read fails; the
                previous snapshot is kept
        """
        try:
            count = ledger.get_model_count()
            models = self._fetch_models(ledger, count)
            snapshot = ModelRegistrySnapshot(tuple(sorted(models, key=lambda m: m.id)))
        except Exception as e:
            self.logger.error(f"Registry refresh failed, keeping previous snapshot: {e}")
            raise RegistryRefreshError(f"Failed to refresh model registry: {e}") from e

        if len(snapshot) != count:
            self.logger.error(f"Registry refresh assembled {len(snapshot)} of {count} models")
            raise RegistryRefreshError(
                f"Registry refresh assembled {len(snapshot)} models, expected {count}"
            )

        with self._lock:
            self._snapshot = snapshot
        self.logger.info(f"Registry refreshed: {count} models")
        return snapshot

    def _fetch_models(self, ledger: "LedgerClient", count: int) -> List[Model]:
        if self.max_workers == 1 or count <= 1:
            return [ledger.get_model(i) for i in range(count)]

        with ThreadPoolExecutor(max_workers=min(self.max_workers, count)) as executor:
            return list(executor.map(ledger.get_model, range(count)))

    def clear(self) -> None:
        """Discard the snapshot (session teardown)."""
        with self._lock:
            self._snapshot = ModelRegistrySnapshot()
