"""
Network Configuration
Resolves the target network, RPC endpoint and signer from config/network_config.json
and environment variables (.env is loaded by the entry point)
"""

import os
import json
from typing import Dict, Optional
from loguru import logger

from blockchain.errors import ConfigurationError
from .logging_config import is_valid_level

DEFAULT_CONFIG_PATH = "config/network_config.json"
DEFAULT_LOG_FILE = "data/logs/deploy.log"

# Used when no config file is present: a local Hardhat/Anvil dev node
DEFAULT_NETWORKS = {
    'default_network': 'localhost',
    'artifacts_dir': 'artifacts',
    'deployment': {
        'gas_limit_multiplier': 1.2,
        'default_gas_limit': 3000000
    },
    'networks': {
        'localhost': {
            'rpc_url': 'http://127.0.0.1:8545',
            'chain_id': 31337
        }
    }
}


class NetworkConfig:
    """
    Settings for a single deployment run
    """

    def __init__(
        self,
        name: str,
        rpc_url: str,
        chain_id: Optional[int] = None,
        private_key: Optional[str] = None,
        artifacts_dir: str = 'artifacts',
        confirmation_timeout: Optional[float] = None,
        gas_limit_multiplier: float = 1.2,
        default_gas_limit: int = 3000000,
        log_level: str = 'INFO',
        log_file: Optional[str] = DEFAULT_LOG_FILE
    ):
        self.name = name
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.private_key = private_key
        self.artifacts_dir = artifacts_dir
        self.confirmation_timeout = confirmation_timeout
        self.gas_limit_multiplier = gas_limit_multiplier
        self.default_gas_limit = default_gas_limit
        self.log_level = log_level
        self.log_file = log_file

    def summary(self) -> Dict:
        """Loggable view of the settings (never includes the private key)"""
        return {
            'network': self.name,
            'rpc_url': self.rpc_url,
            'chain_id': self.chain_id,
            'signer': 'private key' if self.private_key else 'node account',
            'artifacts_dir': self.artifacts_dir,
            'confirmation_timeout': self.confirmation_timeout or 'none'
        }

    def __repr__(self) -> str:
        return f"NetworkConfig(name={self.name!r}, rpc_url={self.rpc_url!r}, chain_id={self.chain_id!r})"


def load_network_config(
    network: Optional[str] = None,
    config_path: Optional[str] = None
) -> NetworkConfig:
    """
    Build the NetworkConfig for this run

    Args:
        network: Network name (None = DEPLOY_NETWORK or the file's default)
        config_path: Path to the JSON network file (None = NETWORK_CONFIG_PATH or default)

    Returns:
        NetworkConfig

    Raises:
        ConfigurationError: unknown network, malformed file or missing RPC URL
    """
    config_path = config_path or os.getenv('NETWORK_CONFIG_PATH', DEFAULT_CONFIG_PATH)
    data = _read_config_file(config_path)

    networks = data.get('networks', {})
    network_name = network or os.getenv('DEPLOY_NETWORK') or data.get('default_network', 'localhost')

    if network_name not in networks:
        available = ', '.join(sorted(networks)) or 'none'
        raise ConfigurationError(
            f"Unknown network '{network_name}' (available: {available})"
        )

    entry = networks[network_name]

    rpc_url = os.getenv('RPC_URL') or entry.get('rpc_url')
    if not rpc_url and entry.get('rpc_url_env'):
        rpc_url = os.getenv(entry['rpc_url_env'])

    if not rpc_url:
        hint = entry.get('rpc_url_env', 'RPC_URL')
        raise ConfigurationError(
            f"No RPC URL for network '{network_name}': set {hint}"
        )

    private_key = os.getenv('DEPLOYER_PRIVATE_KEY')
    if not private_key and entry.get('private_key_env'):
        private_key = os.getenv(entry['private_key_env'])

    deployment = data.get('deployment', {})

    log_file = os.getenv('DEPLOY_LOG_FILE', DEFAULT_LOG_FILE)

    return NetworkConfig(
        name=network_name,
        rpc_url=rpc_url,
        chain_id=_optional_int(entry.get('chain_id'), 'chain_id'),
        private_key=private_key or None,
        artifacts_dir=os.getenv('ARTIFACTS_DIR') or data.get('artifacts_dir', 'artifacts'),
        confirmation_timeout=_parse_timeout(os.getenv('CONFIRMATION_TIMEOUT')),
        gas_limit_multiplier=_positive_float(
            deployment.get('gas_limit_multiplier', 1.2), 'gas_limit_multiplier'
        ),
        default_gas_limit=_optional_int(
            deployment.get('default_gas_limit', 3000000), 'default_gas_limit'
        ),
        log_level=_parse_log_level(os.getenv('LOG_LEVEL', 'INFO')),
        log_file=log_file or None
    )


def _read_config_file(config_path: str) -> Dict:
    """Load the JSON network file, falling back to the built-in localhost network"""
    if not os.path.exists(config_path):
        logger.debug(f"{config_path} not found, using built-in localhost network")
        return DEFAULT_NETWORKS

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get('networks', {}), dict):
        raise ConfigurationError(f"{config_path} must contain a 'networks' object")

    return data


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    """CONFIRMATION_TIMEOUT in seconds; unset or empty means wait forever"""
    if value is None or value.strip() == '':
        return None
    return _positive_float(value, 'CONFIRMATION_TIMEOUT')


def _parse_log_level(value: str) -> str:
    level = value.strip().upper() or 'INFO'
    if not is_valid_level(level):
        raise ConfigurationError(f"LOG_LEVEL {value!r} is not a known log level")
    return level


def _positive_float(value, field: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{field} must be a number, got {value!r}") from e

    if number <= 0:
        raise ConfigurationError(f"{field} must be positive, got {value!r}")

    return number


def _optional_int(value, field: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{field} must be an integer, got {value!r}") from e
