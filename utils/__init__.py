"""
Utilities Package
Configuration, logging and preflight checks for the deployer
"""

from .config import NetworkConfig, load_network_config
from .logging_config import setup_logging
from .preflight import run_preflight

__all__ = [
    'NetworkConfig',
    'load_network_config',
    'setup_logging',
    'run_preflight'
]
