"""
Exceptions for the ModelLease SDK.
"""
from typing import Optional


class ModelLeaseError(Exception):
    """Base exception for all ModelLease SDK errors."""
    pass


class NoProviderError(ModelLeaseError):
    """Raised when no signing provider is available."""
    pass


class UserRejectedError(ModelLeaseError):
    """Raised when the user declines to authorize an account."""
    pass


class ConfigurationMissingError(ModelLeaseError):
    """Raised when required configuration (registry address, credential, URLs) is absent or unusable."""
    pass


class MissingCredentialError(ConfigurationMissingError):
    """Raised when the inference service credential is not configured."""
    pass


class NotReadyError(ModelLeaseError):
    """Raised when an operation needs a connected account or ledger that isn't there."""
    pass


class LedgerUnavailableError(ModelLeaseError):
    """Raised when a registry read fails or the registry address is unset."""
    pass


class LeaseTransactionError(ModelLeaseError):
    """Raised when a lease transaction is rejected, reverted or cannot be sent."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class RegistryRefreshError(ModelLeaseError):
    """Raised when one or more reads fail while refreshing the model registry."""
    pass


class UnknownModelError(ModelLeaseError):
    """Raised when a model id is not present in the current registry snapshot."""

    def __init__(self, model_id: int):
        self.model_id = model_id
        super().__init__(f"Model {model_id} is not in the registry snapshot")


class ModelUnavailableError(ModelLeaseError):
    """Raised when leasing a model marked unavailable and availability is enforced."""

    def __init__(self, model_id: int):
        self.model_id = model_id
        super().__init__(f"Model {model_id} is not available for lease")


class PriceChangedError(ModelLeaseError):
    """Raised when the on-chain price differs from the cached price at submission time."""

    def __init__(self, model_id: int, cached_price: int, current_price: int):
        self.model_id = model_id
        self.cached_price = cached_price
        self.current_price = current_price
        super().__init__(
            f"Price of model {model_id} changed from {cached_price} to {current_price} wei"
        )


class AlreadyPendingError(ModelLeaseError):
    """Raised when a lease attempt for the same model is already in flight."""

    def __init__(self, model_id: int):
        self.model_id = model_id
        super().__init__(f"A lease attempt for model {model_id} is already pending")


class InferenceTransportError(ModelLeaseError):
    """Raised when the inference request fails at the network or HTTP level."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidResponseShapeError(ModelLeaseError):
    """Raised when the inference service returns a body of unexpected shape."""
    pass


class EmptyPromptError(ModelLeaseError):
    """Raised when an empty prompt is rejected before reaching the inference service."""
    pass


# Names used by the error taxonomy
ProviderUnavailable = NoProviderError
AuthorizationDenied = UserRejectedError
ConfigurationMissing = ConfigurationMissingError
LedgerUnavailable = LedgerUnavailableError
LeaseTransactionFailed = LeaseTransactionError
RegistryRefreshFailed = RegistryRefreshError
InferenceTransportFailed = InferenceTransportError
InvalidResponseShape = InvalidResponseShapeError
