"""
Network configuration for the Euler SDK.
"""
import importlib.resources
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from .models import EulerNetwork

logger = logging.getLogger(__name__)


class NetworkConfig:
    """
    Loader for the bundled ``networks.json`` deployment table.

    The table is read once per process and cached on the class.
    """

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load all network configurations

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        text = importlib.resources.files("euler_sdk").joinpath("networks.json").read_text()
        cls._networks_cache = json.loads(text)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the configuration of a network by name

        Raises:
            ValueError: If the network is not configured
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks.keys()))
            raise ValueError(f"Network '{network}' not found. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_network_by_chain_id(cls, chain_id: int) -> Tuple[str, Dict[str, Any]]:
        """
        Find a network by chain id

        Raises:
            ValueError: If no configured network uses the chain id
        """
        for name, config in cls.load_networks().items():
            if int(config.get("chainId", -1)) == int(chain_id):
                return name, config
        raise ValueError(f"Missing addresses for chainId {chain_id}")

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_addresses(cls, network: str) -> Dict[str, str]:
        return dict(cls.get_network(network)["addresses"])

    @classmethod
    def get_reference_asset(cls, network: str) -> str:
        return cls.get_network(network)["referenceAsset"]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Get the RPC URL for a network.

        Precedence: ``override``, then the ``<NETWORK>_RPC_URL`` environment
        variable, then the configuration file.
        """
        if override:
            return override

        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            logger.debug(f"Using RPC URL from {env_var}")
            return env_url

        return cls.get_network(network)["rpc"]

    @classmethod
    def get_euler_network(cls, network: str) -> EulerNetwork:
        return EulerNetwork.model_validate(cls.get_network(network))
