"""
Network and runtime configuration for the ModelLease SDK.
"""
import json
import logging
import os
from importlib import resources
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "local"
DEFAULT_INFERENCE_URL = (
    "https://api-inference.huggingface.co/models/facebook/blenderbot-400M-distill"
)


def _env_prefix(network: str) -> str:
    return network.upper().replace("-", "_")


class NetworkConfig:
    """
    Lookup of bundled network definitions (``networks.json``).

    Values can be overridden per network with ``<NETWORK>_RPC_URL`` and
    ``<NETWORK>_REGISTRY_ADDRESS`` environment variables.
    """

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        if cls._networks_cache is None:
            data = resources.files("modellease_sdk").joinpath("networks.json").read_text()
            cls._networks_cache = json.loads(data)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        if override:
            return override
        env_url = os.environ.get(f"{_env_prefix(network)}_RPC_URL")
        if env_url:
            return env_url
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_registry_address(cls, network: str, override: Optional[str] = None) -> Optional[str]:
        """Registry contract address, or None when the network has none deployed."""
        if override:
            return override
        env_address = os.environ.get(f"{_env_prefix(network)}_REGISTRY_ADDRESS")
        if env_address:
            return env_address
        return cls.get_network(network).get("modelRegistry") or None


class Settings(BaseModel):
    """Runtime settings for a leasing session."""
    rpc_url: str
    registry_address: Optional[str] = None
    chain_id: Optional[int] = None
    inference_api_key: Optional[str] = Field(None, repr=False)
    inference_url: str = DEFAULT_INFERENCE_URL
    inference_timeout: Optional[float] = None
    refresh_workers: int = Field(1, ge=1)
    require_available: bool = False
    verify_price: bool = False
    reject_empty_prompt: bool = False

    @classmethod
    def from_env(cls, network: Optional[str] = None, **overrides: Any) -> "Settings":
        """
        Build settings from the bundled network table and the environment.

        Reads ``MODEL_LEASE_NETWORK``, ``MODEL_REGISTRY_ADDRESS``,
        ``HUGGINGFACE_API_KEY`` and ``INFERENCE_URL``. Keyword overrides win.
        """
        network = network or os.environ.get("MODEL_LEASE_NETWORK", DEFAULT_NETWORK)
        values: Dict[str, Any] = {
            "rpc_url": NetworkConfig.get_rpc_url(network),
            "registry_address": NetworkConfig.get_registry_address(
                network, override=os.environ.get("MODEL_REGISTRY_ADDRESS")
            ),
            "chain_id": NetworkConfig.get_chain_id(network),
            "inference_api_key": os.environ.get("HUGGINGFACE_API_KEY") or None,
            "inference_url": os.environ.get("INFERENCE_URL") or DEFAULT_INFERENCE_URL,
        }
        values.update(overrides)
        logger.debug(f"Loaded settings for network '{network}' (rpc={values['rpc_url']})")
        return cls(**values)
