"""
LeaseCoordinator - runs a single lease attempt end to end.

Each attempt moves IDLE -> VALIDATING -> SUBMITTING -> SUCCEEDED | FAILED.
A successful lease triggers exactly one registry refresh; a failed one
leaves the registry cache untouched. Nothing is retried.
"""
import logging
import threading
from typing import Optional, Set, TYPE_CHECKING

from .exceptions import (
    AlreadyPendingError, ModelUnavailableError, NotReadyError,
    PriceChangedError, UnknownModelError
)
from .models import LeaseAttempt, LeaseState, TxReceipt

if TYPE_CHECKING:
    from .account import AccountSession
    from .ledger import LedgerClient
    from .registry import ModelRegistryCache


class LeaseCoordinator:
    """
    Coordinates leasing a model from the registry.

    The price sent with the transaction is the cached ``price_per_use`` at the
    moment ``lease()`` is called. If the cache is stale the contract rejects
    the payment; pass ``verify_price=True`` to re-read the price first.
    """

    def __init__(
        self,
        account: Optional["AccountSession"],
        ledger: Optional["LedgerClient"],
        registry: "ModelRegistryCache",
        require_available: bool = False,
        verify_price: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            account: Connected account session that pays for leases
            ledger: Ledger client for the registry contract
            registry: Registry cache to read prices from and refresh on success
            require_available: Reject models marked unavailable before submitting
            verify_price: Re-read the model price just before submitting
            logger: Optional logger instance
        """
        self.account = account
        self.ledger = ledger
        self.registry = registry
        self.require_available = require_available
        self.verify_price = verify_price
        self.logger = logger or logging.getLogger(__name__)
        self.last_attempt: Optional[LeaseAttempt] = None
        self._pending: Set[int] = set()
        self._pending_lock = threading.Lock()

    def lease(self, model_id: int) -> TxReceipt:
        """
        Lease a model by paying its cached price

        Args:
            model_id: Registry id of the model

        Returns:
            Receipt of the accepted lease transaction

        Raises:
            NotReadyError: If no account is connected or no ledger is configured
            UnknownModelError: If the model is not in the current snapshot
            ModelUnavailableError: If availability is enforced and the model is unavailable
            PriceChangedError: If price verification is on and the price moved
            AlreadyPendingError: If an attempt on the same model is in flight
            LeaseTransactionError: If the ledger rejects the transaction
            RegistryRefreshError: If the post-lease refresh fails (the lease itself stands)
        """
        attempt = LeaseAttempt(model_id=model_id)

        with self._pending_lock:
            if model_id in self._pending:
                # The in-flight attempt stays the recorded one
                self.logger.warning(f"Lease of model {model_id} already pending")
                raise self._fail(attempt, AlreadyPendingError(model_id))
            self._pending.add(model_id)
        self.last_attempt = attempt

        try:
            self._validate(attempt)
            self._submit(attempt)
        finally:
            with self._pending_lock:
                self._pending.discard(model_id)

        # Ground truth on availability comes from the ledger, not a local flip
        self.registry.refresh(self.ledger)
        return attempt.receipt

    def _validate(self, attempt: LeaseAttempt) -> None:
        attempt.state = LeaseState.VALIDATING

        if self.account is None or not self.account.connected or self.ledger is None:
            raise self._fail(attempt, NotReadyError("Account or ledger not loaded"))

        model = self.registry.get(attempt.model_id)
        if model is None:
            raise self._fail(attempt, UnknownModelError(attempt.model_id))
        if self.require_available and not model.available:
            raise self._fail(attempt, ModelUnavailableError(attempt.model_id))

        attempt.account = self.account.address
        attempt.price = model.price_per_use

        if self.verify_price:
            try:
                current = self.ledger.get_model(attempt.model_id)
            except Exception as e:
                raise self._fail(attempt, e)
            if current.price_per_use != attempt.price:
                raise self._fail(
                    attempt,
                    PriceChangedError(attempt.model_id, attempt.price, current.price_per_use)
                )

    def _submit(self, attempt: LeaseAttempt) -> None:
        attempt.state = LeaseState.SUBMITTING
        self.logger.debug(
            f"Submitting lease of model {attempt.model_id} for {attempt.price} wei from {attempt.account}"
        )
        try:
            attempt.receipt = self.ledger.submit_lease(self.account, attempt.model_id, attempt.price)
        except Exception as e:
            raise self._fail(attempt, e)

        attempt.state = LeaseState.SUCCEEDED
        self.logger.info(f"Model {attempt.model_id} leased in tx {attempt.receipt.tx_hash}")

    def _fail(self, attempt: LeaseAttempt, error: Exception) -> Exception:
        attempt.state = LeaseState.FAILED
        attempt.error = error
        self.logger.error(f"Lease of model {attempt.model_id} failed: {error}")
        return error
