"""
Pytest fixtures for the ModelLease SDK tests.
"""
import pytest
from unittest.mock import MagicMock
from web3.providers.rpc import HTTPProvider

from modellease_sdk.account import AccountSession
from modellease_sdk.ledger import LedgerClient
from modellease_sdk.models import Model, TxReceipt

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_INFERENCE_URL = "https://inference.example.com/models/test-model"
TEST_REGISTRY = "0x1234567890123456789012345678901234567890"
TEST_ACCOUNT = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_API_KEY = "hf_test_key"
TEST_TX_HASH = b"\x11" * 32

SCENARIO_MODELS = [
    ("Summarizer", 100, True),
    ("Translator", 200, False),
]


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    """
    def _dummy(self, method, params=None, _=None):
        if method in {"eth_chainId"}:
            return {"jsonrpc": "2.0", "id": 1, "result": "0x1"}
        if method in {"eth_gasPrice"}:
            return {"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"}  # 1 gwei
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


def make_receipt(status=1, tx_hash=TEST_TX_HASH):
    """A web3-style receipt dictionary"""
    return {
        "transactionHash": tx_hash,
        "blockNumber": 12345,
        "blockHash": bytes.fromhex("abcdef1234567890" * 4),
        "status": status,
        "gasUsed": 85000,
        "from": TEST_ACCOUNT,
        "to": TEST_REGISTRY,
        "logs": [],
    }


def make_contract(models):
    """
    Build a mock registry contract serving ``models``.

    ``models`` is a list of ``(description, pricePerUse, available)`` tuples and
    may be mutated by the test to change what later reads return.
    """
    contract = MagicMock()
    contract.functions.getModelCount.return_value.call.side_effect = lambda: len(models)

    def get_model(model_id):
        fn = MagicMock()
        fn.call.side_effect = lambda: list(models[model_id])
        return fn

    contract.functions.getModel.side_effect = get_model

    def lease_model(model_id):
        fn = MagicMock()
        fn.build_transaction.side_effect = lambda params: {
            **params,
            "to": TEST_REGISTRY,
            "data": "0x" + format(model_id, "064x"),
        }
        return fn

    contract.functions.leaseModel.side_effect = lease_model
    return contract


@pytest.fixture
def scenario_models():
    return [tuple(m) for m in SCENARIO_MODELS]


@pytest.fixture
def mock_contract(scenario_models):
    return make_contract(scenario_models)


@pytest.fixture
def mock_w3(mock_contract):
    """Mock Web3 instance whose contract factory returns ``mock_contract``"""
    w3 = MagicMock()
    w3.eth.contract.return_value = mock_contract
    w3.eth.wait_for_transaction_receipt.return_value = make_receipt()
    return w3


@pytest.fixture
def ledger(mock_w3):
    return LedgerClient(mock_w3, TEST_REGISTRY)


@pytest.fixture
def mock_provider():
    """Signing provider that authorizes TEST_ACCOUNT"""
    provider = MagicMock()
    provider.enable.return_value = None
    provider.get_accounts.return_value = [TEST_ACCOUNT]
    provider.send_transaction.return_value = TEST_TX_HASH
    return provider


@pytest.fixture
def account(mock_provider):
    session = AccountSession(mock_provider)
    session.connect()
    return session


@pytest.fixture
def fake_ledger(scenario_models):
    """
    LedgerClient double with the real method surface, for coordinator tests.
    """
    fake = MagicMock(spec=LedgerClient)
    fake.get_model_count.side_effect = lambda: len(scenario_models)
    fake.get_model.side_effect = lambda i: Model.from_contract(i, scenario_models[i])
    fake.submit_lease.return_value = TxReceipt.from_web3(make_receipt())
    return fake
