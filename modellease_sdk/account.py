"""
Account session and signing providers.

An ``AccountSession`` binds exactly one authorized account from a signing
provider and routes value-bearing transactions through it.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from .exceptions import NoProviderError, NotReadyError, UserRejectedError

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 300000


class SigningProvider(Protocol):
    """Protocol for wallet / signing providers"""

    def enable(self) -> None:
        """Ask the user to authorize account access. Raise UserRejectedError on refusal."""
        ...

    def get_accounts(self) -> List[str]:
        """Return the authorized account addresses, in provider order."""
        ...

    def send_transaction(self, tx: Dict[str, Any]) -> bytes:
        """Sign and broadcast ``tx``, returning the transaction hash."""
        ...


class NodeProvider:
    """
    Signing provider backed by accounts unlocked on the connected node.

    This is the analogue of an injected browser wallet: the node holds the
    keys and signs ``eth_sendTransaction`` requests itself.
    """

    def __init__(self, w3: Web3):
        self.w3 = w3

    def enable(self) -> None:
        if not self.w3.is_connected():
            raise NoProviderError("Signing node is not reachable")

    def get_accounts(self) -> List[str]:
        return list(self.w3.eth.accounts)

    def send_transaction(self, tx: Dict[str, Any]) -> bytes:
        return self.w3.eth.send_transaction(tx)


class LocalKeyProvider:
    """Signing provider backed by a local private key"""

    def __init__(self, w3: Web3, priv_key: str, chain_id: Optional[int] = None):
        self.w3 = w3
        self.account: LocalAccount = Account.from_key(priv_key)
        self.chain_id = chain_id

    def enable(self) -> None:
        # A local key is always authorized
        pass

    def get_accounts(self) -> List[str]:
        return [self.account.address]

    def send_transaction(self, tx: Dict[str, Any]) -> bytes:
        tx = dict(tx)
        tx.setdefault("from", self.account.address)
        if "nonce" not in tx:
            tx["nonce"] = self.w3.eth.get_transaction_count(self.account.address)
        if "gas" not in tx:
            try:
                # Add 10% buffer to gas estimate
                tx["gas"] = int(self.w3.eth.estimate_gas(tx) * 1.1)
            except Exception as e:
                tx["gas"] = DEFAULT_GAS_LIMIT
                logger.warning(f"Gas estimation failed, using default: {DEFAULT_GAS_LIMIT}. Error: {e}")
        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = self.w3.eth.gas_price
        if "chainId" not in tx:
            tx["chainId"] = self.chain_id if self.chain_id is not None else self.w3.eth.chain_id

        signed_tx = self.account.sign_transaction(tx)
        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)


class AccountSession:
    """
    The connected wallet identity.

    Exactly one account is tracked at a time: the first account the provider
    reports after authorization.
    """

    def __init__(self, provider: Optional[SigningProvider], logger: Optional[logging.Logger] = None):
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)
        self._address: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._address is not None

    @property
    def address(self) -> str:
        """
        Get the connected account address

        Raises:
            NotReadyError: If connect() has not succeeded yet
        """
        if self._address is None:
            raise NotReadyError("No account connected")
        return self._address

    def connect(self) -> str:
        """
        Request authorization from the provider and bind the first account

        Returns:
            The connected account address

        Raises:
            NoProviderError: If no signing provider is available or it cannot be reached
            UserRejectedError: If the user declines or no account is authorized
        """
        if self.provider is None:
            self.logger.error("No signing provider available")
            raise NoProviderError("No signing provider is installed")

        try:
            self.provider.enable()
            accounts = self.provider.get_accounts()
        except UserRejectedError:
            self.logger.error("Account authorization was declined")
            raise
        except NoProviderError:
            self.logger.error("Signing provider is unavailable")
            raise
        except Exception as e:
            self.logger.error(f"Signing provider failed: {e}")
            raise NoProviderError(f"Signing provider is unavailable: {e}") from e

        if not accounts:
            self.logger.error("Signing provider returned no accounts")
            raise UserRejectedError("No account was authorized by the signing provider")

        self._address = accounts[0]
        self.logger.info(f"Connected account {self._address}")
        return self._address

    def disconnect(self) -> None:
        self._address = None

    def send_transaction(self, tx: Dict[str, Any]) -> bytes:
        """
        Authorize and send a transaction from the connected account

        Args:
            tx: Transaction dictionary; ``from`` is set to the connected address

        Returns:
            Transaction hash
        """
        tx = dict(tx)
        tx["from"] = self.address
        return self.provider.send_transaction(tx)
