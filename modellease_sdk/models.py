"""
Data models for the ModelLease SDK.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from web3 import Web3

from .utils import hex_str


class Model(BaseModel):
    """A leasable AI model as listed by the registry contract"""
    id: int = Field(..., ge=0)
    description: str
    price_per_use: int = Field(..., ge=0, alias="pricePerUse")
    available: bool

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def price_in_ether(self) -> Decimal:
        """Price converted to ether, for display only."""
        return Decimal(Web3.from_wei(self.price_per_use, "ether"))

    @classmethod
    def from_contract(cls, model_id: int, result: Sequence[Any]) -> "Model":
        """
        Build a Model from a ``getModel(id)`` return tuple

        Args:
            model_id: Registry index the tuple was read from
            result: ``(description, pricePerUse, available)``
        """
        description, price_per_use, available = result[0], result[1], result[2]
        return cls(
            id=model_id,
            description=description,
            price_per_use=int(price_per_use),
            available=bool(available),
        )


@dataclass(frozen=True)
class ModelRegistrySnapshot:
    """
    Immutable, point-in-time copy of the registry's model list.

    Models are ordered by id and ``snapshot[i].id == i`` holds for every index.
    """
    models: Tuple[Model, ...] = ()

    def __post_init__(self):
        for index, model in enumerate(self.models):
            if model.id != index:
                raise ValueError(
                    f"Snapshot index {index} holds model id {model.id}; ids must be dense and ordered"
                )

    def __len__(self) -> int:
        return len(self.models)

    def __getitem__(self, index: int) -> Model:
        return self.models[index]

    def __iter__(self) -> Iterator[Model]:
        return iter(self.models)

    def get(self, model_id: int) -> Optional[Model]:
        """Return the model with ``model_id`` or None if it is out of range."""
        if 0 <= model_id < len(self.models):
            return self.models[model_id]
        return None

    def available(self) -> List[Model]:
        return [m for m in self.models if m.available]


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: str = Field(..., alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_web3(cls, web3_receipt: Mapping[str, Any]) -> "TxReceipt":
        """
        Convert a Web3 receipt to our TxReceipt model

        Args:
            web3_receipt: The Web3 transaction receipt

        Returns:
            Our TxReceipt model
        """
        receipt_dict = dict(web3_receipt)

        # Convert bytes to hex strings
        for key, value in list(receipt_dict.items()):
            if isinstance(value, bytes):
                receipt_dict[key] = hex_str(value)

        receipt_dict["logs"] = [dict(log) for log in receipt_dict.get("logs") or []]
        return cls.model_validate(receipt_dict)


class LeaseState(str, Enum):
    """States of a single lease attempt."""
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass
class LeaseAttempt:
    """
    A single user-triggered lease of a model.

    Attributes:
        model_id: Registry id of the model being leased
        price: Amount in wei sent with the transaction
        account: Address of the paying account
        state: Current state of the attempt
        receipt: Transaction receipt once the ledger accepts the lease
        error: The failure that ended the attempt, if any
    """
    model_id: int
    price: Optional[int] = None
    account: Optional[str] = None
    state: LeaseState = LeaseState.IDLE
    receipt: Optional[TxReceipt] = None
    error: Optional[Exception] = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in (LeaseState.SUCCEEDED, LeaseState.FAILED)


class InferenceRequest(BaseModel):
    """Request body sent to the text-completion service"""
    inputs: str


class Completion(BaseModel):
    """One element of the text-completion service's response list"""
    generated_text: StrictStr = Field(..., min_length=1)


class InferenceResponse(BaseModel):
    """Normalized result of an inference call"""
    text: str
    raw: Optional[str] = None
