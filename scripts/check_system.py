"""
System Check Script
Verifies configuration, RPC, deployer account and the CryptexSphere artifact before deploying
"""

import os
import sys
from loguru import logger
from dotenv import load_dotenv

from blockchain.errors import ConfigurationError
from blockchain.toolchain import ToolchainClient
from utils.config import load_network_config
from utils.logging_config import setup_logging, bootstrap_level
from utils.preflight import run_preflight


def main() -> int:
    load_dotenv()
    setup_logging(bootstrap_level(os.getenv('LOG_LEVEL')))

    try:
        config = load_network_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    toolchain = ToolchainClient(config)
    return 0 if run_preflight(config, toolchain) else 1


if __name__ == "__main__":
    sys.exit(main())
