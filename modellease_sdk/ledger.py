"""
LedgerClient - typed wrapper around the model registry contract.

The client is a stateless pass-through: one contract call per invocation, no
caching and no retries.
"""
import logging
from typing import Optional, TYPE_CHECKING

from web3 import Web3

from .exceptions import LeaseTransactionError, LedgerUnavailableError, NotReadyError
from .models import Model, TxReceipt
from .utils import hex_str, validate_url

if TYPE_CHECKING:
    from .account import AccountSession


class LedgerClient:
    """
    Client for the on-chain AI model leasing registry.

    Reads go through ``getModelCount``/``getModel``; leases are submitted as a
    payable ``leaseModel`` call authorized by an ``AccountSession``.
    """

    # ABI for the AIModelLeasing registry contract
    MODEL_REGISTRY_ABI = [
        {
            "inputs": [],
            "name": "getModelCount",
            "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function"
        },
        {
            "inputs": [{"internalType": "uint256", "name": "modelId", "type": "uint256"}],
            "name": "getModel",
            "outputs": [
                {"internalType": "string", "name": "description", "type": "string"},
                {"internalType": "uint256", "name": "pricePerUse", "type": "uint256"},
                {"internalType": "bool", "name": "available", "type": "bool"}
            ],
            "stateMutability": "view",
            "type": "function"
        },
        {
            "inputs": [{"internalType": "uint256", "name": "modelId", "type": "uint256"}],
            "name": "leaseModel",
            "outputs": [],
            "stateMutability": "payable",
            "type": "function"
        }
    ]

    def __init__(
        self,
        w3: Web3,
        registry_address: Optional[str],
        receipt_timeout: int = 120,
        poll_interval: float = 0.1,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the LedgerClient

        Args:
            w3: Connected Web3 instance
            registry_address: Model registry contract address (reads fail without it)
            receipt_timeout: Seconds to wait for a lease transaction receipt
            poll_interval: How often to poll for the receipt, in seconds
            logger: Optional logger instance to use for debug/info logging
        """
        self.w3 = w3
        self.registry_address = registry_address
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)

        self.contract = None
        if registry_address:
            self.contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(registry_address),
                abi=self.MODEL_REGISTRY_ABI
            )

    @classmethod
    def from_rpc(cls, rpc_url: str, registry_address: Optional[str], **kwargs) -> "LedgerClient":
        """
        Build a client over an HTTP JSON-RPC endpoint

        Raises:
            ValueError: If the URL doesn't use https (unless it's localhost/127.0.0.1)
        """
        validate_url("rpc_url", rpc_url)
        return cls(Web3(Web3.HTTPProvider(rpc_url)), registry_address, **kwargs)

    def _require_contract(self):
        if self.contract is None:
            raise LedgerUnavailableError("Registry contract address is not set")
        return self.contract

    def get_model_count(self) -> int:
        """
        Number of models currently registered

        Raises:
            LedgerUnavailableError: If the address is unset or the call fails
        """
        contract = self._require_contract()
        try:
            count = int(contract.functions.getModelCount().call())
        except Exception as e:
            self.logger.error(f"getModelCount failed: {e}")
            raise LedgerUnavailableError(f"Failed to read model count: {e}") from e
        self.logger.debug(f"Registry reports {count} models")
        return count

    def get_model(self, model_id: int) -> Model:
        """
        Read a single model by registry index

        The caller keeps ``model_id`` within ``[0, get_model_count())``.

        Raises:
            LedgerUnavailableError: If the call fails
        """
        contract = self._require_contract()
        try:
            result = contract.functions.getModel(model_id).call()
            return Model.from_contract(model_id, result)
        except Exception as e:
            self.logger.error(f"getModel({model_id}) failed: {e}")
            raise LedgerUnavailableError(f"Failed to read model {model_id}: {e}") from e

    def submit_lease(self, account: "AccountSession", model_id: int, price: int) -> TxReceipt:
        """
        Submit a paid ``leaseModel`` transaction and wait for its receipt

        Args:
            account: Connected account session that authorizes the payment
            model_id: Registry id of the model to lease
            price: Amount in wei; the contract requires it to equal ``pricePerUse``

        Returns:
            Transaction receipt

        Raises:
            NotReadyError: If the account session is not connected
            LeaseTransactionError: If the transaction is rejected, reverts or times out
        """
        if self.contract is None:
            raise LeaseTransactionError("Registry contract address is not set")

        from_address = account.address
        tx_hash = None
        try:
            tx = self.contract.functions.leaseModel(model_id).build_transaction({
                "from": from_address,
                "value": price,
            })
            tx_hash = account.send_transaction(tx)
            self.logger.info(f"Lease transaction sent: {hex_str(tx_hash)}")

            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_interval
            )
        except NotReadyError:
            raise
        except Exception as e:
            self.logger.error(f"Lease of model {model_id} failed: {e}")
            raise LeaseTransactionError(
                f"Lease transaction failed: {e}",
                tx_hash=hex_str(tx_hash) if tx_hash else None
            ) from e

        tx_receipt = TxReceipt.from_web3(receipt)
        if not tx_receipt.succeeded:
            self.logger.error(f"Lease transaction {tx_receipt.tx_hash} reverted")
            raise LeaseTransactionError(
                f"Lease transaction {tx_receipt.tx_hash} reverted",
                tx_hash=tx_receipt.tx_hash
            )
        return tx_receipt
