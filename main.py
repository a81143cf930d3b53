"""
CryptexSphere Deployer - Main Entry Point
Deploys the CryptexSphere contract to the configured network
"""

import os
import sys
from loguru import logger
from dotenv import load_dotenv

from blockchain.deployer import Deployer, DeploymentResult
from blockchain.errors import ConfigurationError
from blockchain.toolchain import ToolchainClient
from utils.config import load_network_config
from utils.logging_config import setup_logging, bootstrap_level


def report(result: DeploymentResult) -> int:
    """
    Print the result line or the error and pick the exit code

    Returns:
        0 on success, 1 on failure
    """
    if result.ok:
        print(result.success_line(), flush=True)
        return 0

    logger.opt(exception=result.error).error(
        f"{result.contract_name} deployment failed: {result.error}"
    )
    return 1


def main(toolchain=None) -> int:
    """
    Deploy once and return the process exit code

    Args:
        toolchain: Pre-built toolchain client (None = build one from configuration)
    """
    load_dotenv()
    setup_logging(bootstrap_level(os.getenv('LOG_LEVEL')))

    try:
        config = load_network_config()
        setup_logging(config.log_level, config.log_file)

        logger.info("=" * 70)
        logger.info(f"CryptexSphere deployment on {config.name}")
        logger.info("=" * 70)

        if toolchain is None:
            toolchain = ToolchainClient(config)

        result = Deployer(toolchain).run()
        return report(result)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted; a submitted deployment transaction may still be mined")
        return 1
    except Exception as e:
        logger.opt(exception=e).error(f"Fatal error: {e}")
        return 1


def cli():
    """Console script entry"""
    sys.exit(main())


if __name__ == "__main__":
    cli()
