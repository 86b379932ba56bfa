"""
Session bootstrap.

``bootstrap()`` connects the account, builds the ledger client and fills the
registry cache once. The resulting ``Session`` is passed explicitly to the
host UI and torn down with ``close()``; it is never rebuilt implicitly.
"""
import logging
from typing import Optional, Tuple

from web3 import Web3

from .account import AccountSession, SigningProvider
from .config import Settings
from .exceptions import ConfigurationMissingError, NotReadyError
from .inference import InferenceGateway
from .lease import LeaseCoordinator
from .ledger import LedgerClient
from .models import Model, ModelRegistrySnapshot, TxReceipt
from .registry import ModelRegistryCache

logger = logging.getLogger(__name__)


class Session:
    """
    A live leasing session: one connected account bound to one registry.

    Attributes:
        account: The connected account session
        ledger: Ledger client for the registry contract
        registry: Cache of the registry's models
        coordinator: Lease coordinator for this account
        inference: Gateway to the text-completion service
        output: Text of the most recent successful inference, if any
    """

    def __init__(
        self,
        account: AccountSession,
        ledger: LedgerClient,
        registry: ModelRegistryCache,
        coordinator: LeaseCoordinator,
        inference: InferenceGateway
    ):
        self.account = account
        self.ledger = ledger
        self.registry = registry
        self.coordinator = coordinator
        self.inference = inference
        self.output: Optional[str] = None
        self._closed = False

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise NotReadyError("Session is closed")

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def models(self) -> ModelRegistrySnapshot:
        return self.registry.snapshot

    def refresh(self) -> ModelRegistrySnapshot:
        self._check_open()
        return self.registry.refresh(self.ledger)

    def lease(self, model_id: int) -> TxReceipt:
        self._check_open()
        return self.coordinator.lease(model_id)

    def infer(self, prompt: str) -> str:
        """Run an inference and keep its text as the current output."""
        self._check_open()
        self.output = self.inference.infer(prompt)
        return self.output

    def describe_models(self) -> Tuple[Tuple[Model, str], ...]:
        """Models paired with their price formatted in ether."""
        return tuple((m, f"{m.price_in_ether:f} ETH") for m in self.models)

    def close(self) -> None:
        """Tear the session down: drop the snapshot, the account and HTTP resources."""
        if self._closed:
            return
        self._closed = True
        self.registry.clear()
        self.account.disconnect()
        self.inference.close()
        logger.info("Session closed")


def bootstrap(
    settings: Settings,
    provider: Optional[SigningProvider],
    w3: Optional[Web3] = None,
    inference: Optional[InferenceGateway] = None
) -> Session:
    """
    Connect the wallet, bind the registry and load its models

    Args:
        settings: Runtime settings (registry address, inference credential, ...)
        provider: Signing provider; None means no wallet is installed
        w3: Web3 instance to use (built from ``settings.rpc_url`` otherwise)
        inference: Inference gateway to use (built from settings otherwise)

    Returns:
        A ready Session

    Raises:
        NoProviderError: If no signing provider is available
        UserRejectedError: If the user declines authorization
        ConfigurationMissingError: If no registry address is configured or a
            connection URL is unusable
        RegistryRefreshError: If the initial model load fails
    """
    account = AccountSession(provider)
    account.connect()

    try:
        if not settings.registry_address:
            logger.error("Registry contract address not found; deploy the contract and configure it")
            raise ConfigurationMissingError(
                "Registry contract address not found! Deploy the contract and configure its address."
            )

        try:
            if w3 is None:
                ledger = LedgerClient.from_rpc(settings.rpc_url, settings.registry_address)
            else:
                ledger = LedgerClient(w3, settings.registry_address)
            if inference is None:
                inference = InferenceGateway(
                    settings.inference_api_key,
                    model_url=settings.inference_url,
                    timeout=settings.inference_timeout,
                    reject_empty=settings.reject_empty_prompt
                )
        except ValueError as e:
            logger.error(f"Invalid connection settings: {e}")
            raise ConfigurationMissingError(f"Invalid connection settings: {e}") from e

        registry = ModelRegistryCache(max_workers=settings.refresh_workers)
        try:
            registry.refresh(ledger)
        except Exception:
            logger.error("Failed to load accounts or contract models")
            raise
    except Exception:
        # No half-built session keeps the account
        account.disconnect()
        raise

    coordinator = LeaseCoordinator(
        account,
        ledger,
        registry,
        require_available=settings.require_available,
        verify_price=settings.verify_price
    )

    logger.info(f"Session ready for {account.address} with {len(registry.snapshot)} models")
    return Session(account, ledger, registry, coordinator, inference)
