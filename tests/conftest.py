"""
Shared test fixtures: fake toolchain, mocked Web3, Hardhat artifact files
"""

import json
import pytest
from unittest.mock import Mock
from loguru import logger
from web3 import Web3

from blockchain.errors import ArtifactNotFound
from blockchain.toolchain import DeployedContract
from utils.config import NetworkConfig

# Hardhat dev node account #0
DEV_PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'
DEV_ACCOUNT = '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266'

CONTRACT_ADDRESS = '0x5FbDB2315678afecb367f032d93F642f64180aa3'
TX_HASH = b'\xab' * 32

ENV_VARS = [
    'DEPLOY_NETWORK',
    'RPC_URL',
    'DEPLOYER_PRIVATE_KEY',
    'ARTIFACTS_DIR',
    'CONFIRMATION_TIMEOUT',
    'LOG_LEVEL',
    'DEPLOY_LOG_FILE',
    'NETWORK_CONFIG_PATH',
    'SEPOLIA_RPC_URL',
    'ALCHEMY_RPC_URL'
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from the developer's environment and log sinks"""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
    logger.remove()


class FakePending:
    def __init__(self, address, error=None):
        self.address = address
        self.error = error

    def wait_for_deployment(self):
        if self.error is not None:
            raise self.error
        return DeployedContract('CryptexSphere', self.address, '0x' + 'ab' * 32, 1, 90000)


class FakeFactory:
    def __init__(self, toolchain):
        self.toolchain = toolchain

    def deploy(self, *args):
        self.toolchain.deploy_calls.append(args)
        if self.toolchain.submission_error is not None:
            raise self.toolchain.submission_error
        return FakePending(self.toolchain.next_address(), self.toolchain.confirmation_error)


class FakeToolchain:
    """Stand-in for ToolchainClient that never touches a network"""

    def __init__(
        self,
        known=('CryptexSphere',),
        submission_error=None,
        confirmation_error=None
    ):
        self.known = set(known)
        self.submission_error = submission_error
        self.confirmation_error = confirmation_error
        self.requested = []
        self.deploy_calls = []
        self._counter = 0

    def get_contract_factory(self, name):
        self.requested.append(name)
        if name not in self.known:
            raise ArtifactNotFound(
                name,
                f"Artifact for contract {name} not found in artifacts. Run 'npx hardhat compile' first"
            )
        return FakeFactory(self)

    def next_address(self):
        # New contract instance per deployment
        self._counter += 1
        return Web3.to_checksum_address('0x' + f'{self._counter:040x}')


@pytest.fixture
def fake_toolchain():
    """Factory for FakeToolchain instances"""
    return FakeToolchain


@pytest.fixture
def write_artifact(tmp_path):
    """Write a Hardhat-style artifact under tmp_path/artifacts"""
    root = tmp_path / 'artifacts'

    def _write(name='CryptexSphere', source=None, bytecode='0x6080604052', abi=None, link_references=None):
        source = source or f'contracts/{name}.sol'
        directory = root / source
        directory.mkdir(parents=True, exist_ok=True)
        artifact = {
            '_format': 'hh-sol-artifact-1',
            'contractName': name,
            'sourceName': source,
            'abi': abi if abi is not None else [],
            'bytecode': bytecode,
            'deployedBytecode': bytecode,
            'linkReferences': link_references or {},
            'deployedLinkReferences': {}
        }
        path = directory / f'{name}.json'
        path.write_text(json.dumps(artifact))
        return path

    _write.root = root
    return _write


@pytest.fixture
def network_config(tmp_path):
    """Localhost config pointing at tmp_path/artifacts"""
    return NetworkConfig(
        name='localhost',
        rpc_url='http://127.0.0.1:8545',
        chain_id=31337,
        artifacts_dir=str(tmp_path / 'artifacts'),
        log_file=None
    )


@pytest.fixture
def mock_w3():
    """Web3 mock behaving like a healthy dev node"""
    w3 = Mock()
    w3.is_connected.return_value = True
    w3.eth.accounts = [DEV_ACCOUNT]
    w3.eth.get_balance.return_value = 10 ** 22
    w3.from_wei.return_value = 10000
    w3.eth.get_transaction_count.return_value = 0
    w3.eth.block_number = 5
    w3.eth.chain_id = 31337

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100000
    constructor.build_transaction.side_effect = lambda params: dict(
        params, data='0x6080604052', value=0, gasPrice=10 ** 9
    )
    constructor.transact.return_value = TX_HASH
    constructor.data_in_transaction = '0x6080604052'

    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': CONTRACT_ADDRESS,
        'blockNumber': 6,
        'gasUsed': 90000
    }
    w3.eth.get_code.return_value = b'\x60\x80\x60\x40\x52'
    return w3
