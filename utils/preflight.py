"""
Preflight Checks
Read-only checks of configuration, RPC, signer and artifact before deploying
"""

from typing import Optional
from eth_account import Account
from loguru import logger

from blockchain.deployer import CONTRACT_NAME
from blockchain.errors import ArtifactNotFound


def check_configuration(config) -> bool:
    """Log the resolved settings"""
    logger.info("Checking configuration...")

    for key, value in config.summary().items():
        logger.info(f"  {key}: {value}")

    logger.success("✓ Configuration loaded")
    return True


def check_rpc_connection(w3, config) -> bool:
    """Check the RPC endpoint answers and serves the expected chain"""
    logger.info("Checking RPC connection...")

    try:
        if not w3.is_connected():
            logger.error(f"  ✗ {config.rpc_url}: Connection failed")
            return False

        block = w3.eth.block_number
        chain_id = w3.eth.chain_id
    except Exception as e:
        logger.error(f"  ✗ {config.rpc_url}: {e}")
        return False

    if config.chain_id is not None and chain_id != config.chain_id:
        logger.error(
            f"  ✗ Chain id mismatch: node reports {chain_id}, "
            f"network '{config.name}' expects {config.chain_id}"
        )
        return False

    logger.success(f"✓ Connected to {config.name} (Block: {block}, Chain: {chain_id})")
    return True


def check_signer(w3, config) -> bool:
    """Check a deployer account is available and report its balance"""
    logger.info("Checking deployer account...")

    address = _signer_address(w3, config)
    if address is None:
        return False

    try:
        balance = w3.from_wei(w3.eth.get_balance(address), 'ether')
    except Exception as e:
        logger.error(f"  ✗ Error checking balance of {address}: {e}")
        return False

    logger.info(f"  Deployer: {address}")
    logger.info(f"  Balance: {balance} ETH")

    if balance <= 0:
        logger.error("  ✗ Deployer has no funds for gas")
        return False

    logger.success("✓ Deployer account ready")
    return True


def check_artifact(toolchain, contract_name: str = CONTRACT_NAME) -> bool:
    """Check the contract artifact resolves and is deployable"""
    logger.info(f"Checking {contract_name} artifact...")

    try:
        artifact = toolchain.resolve_artifact(contract_name)
    except ArtifactNotFound as e:
        logger.error(f"  ✗ {e}")
        return False

    logger.success(f"✓ {artifact.fully_qualified_name} ({artifact.path})")
    return True


def run_preflight(config, toolchain, contract_name: str = CONTRACT_NAME) -> bool:
    """
    Run every check; never sends a transaction

    Args:
        config: NetworkConfig
        toolchain: ToolchainClient
        contract_name: Contract whose artifact must resolve

    Returns:
        True if all checks pass
    """
    logger.info("=" * 70)
    logger.info("Deployment preflight")
    logger.info("=" * 70)

    results = {
        'configuration': check_configuration(config),
        'artifact': check_artifact(toolchain, contract_name),
        'rpc': check_rpc_connection(toolchain.w3, config)
    }

    # Signer balance needs a live node
    if results['rpc']:
        results['signer'] = check_signer(toolchain.w3, config)
    else:
        results['signer'] = False

    failed = [name for name, passed in results.items() if not passed]

    logger.info("=" * 70)
    if failed:
        logger.error(f"Preflight failed: {', '.join(failed)}")
        return False

    logger.success("All preflight checks passed")
    return True


def _signer_address(w3, config) -> Optional[str]:
    if config.private_key:
        try:
            return Account.from_key(config.private_key).address
        except Exception as e:
            logger.error(f"  ✗ Invalid DEPLOYER_PRIVATE_KEY ({type(e).__name__})")
            return None

    try:
        accounts = w3.eth.accounts
    except Exception as e:
        logger.error(f"  ✗ Cannot list node accounts: {e}")
        return None

    if not accounts:
        logger.error("  ✗ No DEPLOYER_PRIVATE_KEY and the node has no unlocked accounts")
        return None

    return accounts[0]
