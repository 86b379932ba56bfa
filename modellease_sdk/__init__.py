"""
ModelLease SDK - lease AI models from an on-chain registry and query an
inference service.
"""
from .account import AccountSession, LocalKeyProvider, NodeProvider, SigningProvider
from .config import NetworkConfig, Settings
from .exceptions import (
    AlreadyPendingError, ConfigurationMissingError, EmptyPromptError,
    InferenceTransportError, InvalidResponseShapeError, LeaseTransactionError,
    LedgerUnavailableError, MissingCredentialError, ModelLeaseError,
    ModelUnavailableError, NoProviderError, NotReadyError, PriceChangedError,
    RegistryRefreshError, UnknownModelError, UserRejectedError
)
from .inference import InferenceGateway
from .lease import LeaseCoordinator
from .ledger import LedgerClient
from .models import LeaseAttempt, LeaseState, Model, ModelRegistrySnapshot, TxReceipt
from .registry import ModelRegistryCache
from .session import Session, bootstrap
from .version import __version__

__all__ = [
    "AccountSession",
    "LocalKeyProvider",
    "NodeProvider",
    "SigningProvider",
    "NetworkConfig",
    "Settings",
    "InferenceGateway",
    "LeaseCoordinator",
    "LedgerClient",
    "ModelRegistryCache",
    "Session",
    "bootstrap",
    "LeaseAttempt",
    "LeaseState",
    "Model",
    "ModelRegistrySnapshot",
    "TxReceipt",
    "ModelLeaseError",
    "NoProviderError",
    "UserRejectedError",
    "ConfigurationMissingError",
    "MissingCredentialError",
    "NotReadyError",
    "LedgerUnavailableError",
    "LeaseTransactionError",
    "RegistryRefreshError",
    "UnknownModelError",
    "ModelUnavailableError",
    "PriceChangedError",
    "AlreadyPendingError",
    "InferenceTransportError",
    "InvalidResponseShapeError",
    "EmptyPromptError",
    "__version__",
]
