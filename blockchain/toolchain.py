"""
Toolchain Client
Resolves Hardhat contract artifacts and deploys them through web3
"""

import os
import glob
import json
from typing import Dict, List, Optional
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted
from eth_account import Account
from loguru import logger

from .errors import ArtifactNotFound, SubmissionError, ConfirmationError


class ContractArtifact:
    """Compiled contract as written by `npx hardhat compile`"""

    def __init__(
        self,
        contract_name: str,
        source_name: str,
        abi: List[Dict],
        bytecode: str,
        path: str
    ):
        self.contract_name = contract_name
        self.source_name = source_name
        self.abi = abi
        self.bytecode = bytecode
        self.path = path

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"


class DeployedContract:
    """Confirmed on-chain contract instance"""

    def __init__(
        self,
        contract_name: str,
        address: str,
        transaction_hash: str,
        block_number: Optional[int] = None,
        gas_used: Optional[int] = None
    ):
        self.contract_name = contract_name
        self.address = address
        self.transaction_hash = transaction_hash
        self.block_number = block_number
        self.gas_used = gas_used


class PendingDeployment:
    """
    Deployment transaction that has been sent but not yet confirmed
    """

    def __init__(
        self,
        w3: Web3,
        contract_name: str,
        transaction_hash: str,
        call_params: Dict,
        timeout: Optional[float] = None
    ):
        """
        Args:
            w3: Web3 instance
            contract_name: Name of the contract being deployed
            transaction_hash: Hex hash of the deployment transaction
            call_params: from/data/gas of the creation, used to replay reverts
            timeout: Seconds to wait for the receipt (None = no limit)
        """
        self.w3 = w3
        self.contract_name = contract_name
        self.transaction_hash = transaction_hash
        self.call_params = call_params
        self.timeout = timeout

    def wait_for_deployment(self) -> DeployedContract:
        """
        Block until the deployment transaction is mined

        Returns:
            DeployedContract

        Raises:
            ConfirmationError: timeout, revert, or no contract at the receipt address
        """
        logger.info("Waiting for confirmation...")

        timeout = self.timeout if self.timeout is not None else float('inf')

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                self.transaction_hash,
                timeout=timeout
            )
        except TimeExhausted as e:
            raise ConfirmationError(
                f"{self.contract_name} deployment {self.transaction_hash} "
                f"not confirmed within {self.timeout}s",
                transaction_hash=self.transaction_hash
            ) from e
        except Exception as e:
            raise ConfirmationError(
                f"Error waiting for {self.contract_name} deployment {self.transaction_hash}: {e}",
                transaction_hash=self.transaction_hash
            ) from e

        if receipt['status'] != 1:
            reason = self._revert_reason(receipt)
            raise ConfirmationError(
                f"{self.contract_name} deployment reverted "
                f"(transaction {self.transaction_hash}): {reason or 'no revert reason returned'}",
                transaction_hash=self.transaction_hash,
                revert_reason=reason
            )

        address = receipt.get('contractAddress')
        if not address:
            raise ConfirmationError(
                f"Receipt for {self.transaction_hash} has no contract address",
                transaction_hash=self.transaction_hash
            )

        try:
            code = self.w3.eth.get_code(address)
        except Exception as e:
            raise ConfirmationError(
                f"Error reading code at {address}: {e}",
                transaction_hash=self.transaction_hash
            ) from e

        if not code:
            raise ConfirmationError(
                f"No contract code at {address} after deployment",
                transaction_hash=self.transaction_hash
            )

        deployed = DeployedContract(
            contract_name=self.contract_name,
            address=Web3.to_checksum_address(address),
            transaction_hash=self.transaction_hash,
            block_number=receipt.get('blockNumber'),
            gas_used=receipt.get('gasUsed')
        )

        logger.success(f"Confirmed in block {deployed.block_number} (gas used: {deployed.gas_used})")
        return deployed

    def _revert_reason(self, receipt) -> Optional[str]:
        """Replay the creation with eth_call at the parent block to recover the revert reason"""
        block_number = receipt.get('blockNumber')
        block_identifier = block_number - 1 if block_number else 'latest'

        try:
            self.w3.eth.call(self.call_params, block_identifier)
        except ContractLogicError as e:
            return getattr(e, 'message', None) or str(e)
        except Exception as e:
            if 'revert' in str(e).lower():
                return str(e)
            logger.debug(f"Could not replay reverted deployment: {e}")

        return None


class ContractFactory:
    """
    Artifact bound to a connection and signer, ready to deploy
    """

    def __init__(
        self,
        w3: Web3,
        artifact: ContractArtifact,
        rpc_url: str,
        private_key: Optional[str] = None,
        chain_id: Optional[int] = None,
        gas_limit_multiplier: float = 1.2,
        default_gas_limit: int = 3000000,
        confirmation_timeout: Optional[float] = None
    ):
        self.w3 = w3
        self.artifact = artifact
        self.rpc_url = rpc_url
        self.private_key = private_key
        self.chain_id = chain_id
        self.gas_limit_multiplier = gas_limit_multiplier
        self.default_gas_limit = default_gas_limit
        self.confirmation_timeout = confirmation_timeout

    def deploy(self, *constructor_args) -> PendingDeployment:
        """
        Send the deployment transaction

        Args:
            constructor_args: Contract constructor arguments

        Returns:
            PendingDeployment

        Raises:
            SubmissionError: unreachable node, no signer, or the node rejected the transaction
        """
        name = self.artifact.contract_name

        if not self._is_connected():
            raise SubmissionError(f"Cannot connect to RPC endpoint {self.rpc_url}")

        sender, account = self._resolve_signer()
        logger.info(f"Deploying {name} from: {sender}")

        try:
            contract = self.w3.eth.contract(abi=self.artifact.abi, bytecode=self.artifact.bytecode)
            constructor = contract.constructor(*constructor_args)

            balance = self.w3.eth.get_balance(sender)
            logger.info(f"Account balance: {self.w3.from_wei(balance, 'ether')} ETH")

            gas_limit = self._estimate_gas(constructor, sender)

            tx_params = {
                'from': sender,
                'gas': gas_limit,
                'nonce': self.w3.eth.get_transaction_count(sender, 'pending')
            }
            if self.chain_id is not None:
                tx_params['chainId'] = self.chain_id

            if account is not None:
                transaction = constructor.build_transaction(tx_params)
                signed_tx = account.sign_transaction(transaction)
                tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            else:
                tx_hash = constructor.transact(tx_params)

        except Exception as e:
            raise SubmissionError(f"Failed to submit {name} deployment: {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent: {tx_hash_hex}")

        return PendingDeployment(
            w3=self.w3,
            contract_name=name,
            transaction_hash=tx_hash_hex,
            call_params={
                'from': sender,
                'data': constructor.data_in_transaction,
                'gas': gas_limit
            },
            timeout=self.confirmation_timeout
        )

    def _is_connected(self) -> bool:
        try:
            return self.w3.is_connected()
        except Exception as e:
            logger.debug(f"Connection check failed: {e}")
            return False

    def _resolve_signer(self):
        """
        Pick the deploying account

        Returns:
            (sender address, LocalAccount or None when the node signs)
        """
        if self.private_key:
            try:
                account = Account.from_key(self.private_key)
            except Exception as e:
                raise SubmissionError(
                    f"Invalid deployer private key ({type(e).__name__})"
                ) from e
            return account.address, account

        try:
            accounts = self.w3.eth.accounts
        except Exception as e:
            raise SubmissionError(f"Cannot list node accounts: {e}") from e

        if not accounts:
            raise SubmissionError(
                "No deployer account: set DEPLOYER_PRIVATE_KEY "
                "or use a node with unlocked accounts"
            )

        return accounts[0], None

    def _estimate_gas(self, constructor, sender: str) -> int:
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            gas_limit = int(gas_estimate * self.gas_limit_multiplier)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            gas_limit = self.default_gas_limit

        logger.info(f"Gas limit: {gas_limit}")
        return gas_limit


class ToolchainClient:
    """
    Entry point to the compiled artifacts and the configured network

    Resolving an artifact never touches the network; connection and signer
    problems surface when a factory deploys.
    """

    def __init__(self, config, w3: Optional[Web3] = None):
        """
        Args:
            config: NetworkConfig
            w3: Web3 instance (None = HTTPProvider on config.rpc_url)
        """
        self.config = config
        self.w3 = w3 if w3 is not None else Web3(Web3.HTTPProvider(config.rpc_url))
        self.artifacts_dir = config.artifacts_dir

        logger.debug(f"Toolchain client on {config.name} ({config.rpc_url})")

    def resolve_artifact(self, name: str) -> ContractArtifact:
        """
        Load a compiled contract by name

        Args:
            name: Contract name or fully qualified name (contracts/File.sol:Name)

        Returns:
            ContractArtifact

        Raises:
            ArtifactNotFound: unknown, ambiguous, unreadable or not deployable
        """
        if ':' in name:
            source_name, contract_name = name.rsplit(':', 1)
            path = os.path.join(self.artifacts_dir, source_name, f"{contract_name}.json")
            if not os.path.isfile(path):
                raise ArtifactNotFound(
                    name,
                    f"Artifact for {name} not found at {path}. Run 'npx hardhat compile' first"
                )
            return self._load_artifact(name, path)

        pattern = os.path.join(self.artifacts_dir, '**', f"{name}.json")
        candidates = sorted(
            p for p in glob.glob(pattern, recursive=True)
            if 'build-info' not in p.split(os.sep)
        )

        if not candidates:
            raise ArtifactNotFound(
                name,
                f"Artifact for contract {name} not found in {self.artifacts_dir}. "
                "Run 'npx hardhat compile' first"
            )

        if len(candidates) > 1:
            qualified = ', '.join(self._qualified_name(p, name) for p in candidates)
            raise ArtifactNotFound(
                name,
                f"Multiple artifacts for contract {name}: {qualified}. Use a fully qualified name"
            )

        return self._load_artifact(name, candidates[0])

    def get_contract_factory(self, name: str) -> ContractFactory:
        """
        Resolve an artifact and bind it to this client's network and signer

        Args:
            name: Contract name or fully qualified name

        Returns:
            ContractFactory
        """
        artifact = self.resolve_artifact(name)
        logger.info(f"Resolved {artifact.fully_qualified_name} ({artifact.path})")

        return ContractFactory(
            w3=self.w3,
            artifact=artifact,
            rpc_url=self.config.rpc_url,
            private_key=self.config.private_key,
            chain_id=self.config.chain_id,
            gas_limit_multiplier=self.config.gas_limit_multiplier,
            default_gas_limit=self.config.default_gas_limit,
            confirmation_timeout=self.config.confirmation_timeout
        )

    def _qualified_name(self, path: str, contract_name: str) -> str:
        source_dir = os.path.relpath(os.path.dirname(path), self.artifacts_dir)
        return f"{source_dir.replace(os.sep, '/')}:{contract_name}"

    def _load_artifact(self, name: str, path: str) -> ContractArtifact:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ArtifactNotFound(name, f"Cannot read artifact {path}: {e}") from e

        if not isinstance(data, dict) or 'abi' not in data or 'bytecode' not in data:
            raise ArtifactNotFound(name, f"{path} is not a contract artifact")

        bytecode = data['bytecode'] or ''
        if bytecode in ('', '0x'):
            raise ArtifactNotFound(
                name,
                f"{name} has no bytecode (abstract contract or interface) and cannot be deployed"
            )

        if data.get('linkReferences'):
            libraries = ', '.join(
                lib for source in data['linkReferences'].values() for lib in source
            )
            raise ArtifactNotFound(
                name,
                f"{name} needs linked libraries ({libraries}) and cannot be deployed as-is"
            )

        contract_name = data.get('contractName', name.rsplit(':', 1)[-1])
        source_name = data.get('sourceName') or self._qualified_name(path, contract_name).rsplit(':', 1)[0]

        return ContractArtifact(
            contract_name=contract_name,
            source_name=source_name,
            abi=data['abi'],
            bytecode=bytecode,
            path=path
        )
