"""
Preflight Check Tests
"""

import os
import importlib.util
import pytest

from blockchain.toolchain import ToolchainClient
from utils.preflight import (
    check_artifact,
    check_rpc_connection,
    check_signer,
    run_preflight
)

from conftest import DEV_PRIVATE_KEY, DEV_ACCOUNT


class TestPreflight:
    """Test individual checks"""

    def test_rpc_connected(self, mock_w3, network_config):
        assert check_rpc_connection(mock_w3, network_config)

    def test_rpc_unreachable(self, mock_w3, network_config):
        mock_w3.is_connected.return_value = False

        assert not check_rpc_connection(mock_w3, network_config)

    def test_chain_id_mismatch(self, mock_w3, network_config):
        mock_w3.eth.chain_id = 1

        assert not check_rpc_connection(mock_w3, network_config)

    def test_signer_from_node_accounts(self, mock_w3, network_config):
        assert check_signer(mock_w3, network_config)

        mock_w3.eth.get_balance.assert_called_once_with(DEV_ACCOUNT)

    def test_signer_from_private_key(self, mock_w3, network_config):
        network_config.private_key = DEV_PRIVATE_KEY
        mock_w3.eth.accounts = []

        assert check_signer(mock_w3, network_config)

        mock_w3.eth.get_balance.assert_called_once_with(DEV_ACCOUNT)

    def test_signer_without_funds(self, mock_w3, network_config):
        mock_w3.from_wei.return_value = 0

        assert not check_signer(mock_w3, network_config)

    def test_no_signer(self, mock_w3, network_config):
        mock_w3.eth.accounts = []

        assert not check_signer(mock_w3, network_config)

    def test_artifact_missing(self, mock_w3, network_config):
        toolchain = ToolchainClient(network_config, w3=mock_w3)

        assert not check_artifact(toolchain)

    def test_artifact_present(self, mock_w3, network_config, write_artifact):
        write_artifact()
        toolchain = ToolchainClient(network_config, w3=mock_w3)

        assert check_artifact(toolchain)


class TestRunPreflight:
    """Test the combined run"""

    def test_all_checks_pass(self, mock_w3, network_config, write_artifact):
        write_artifact()
        toolchain = ToolchainClient(network_config, w3=mock_w3)

        assert run_preflight(network_config, toolchain)

    def test_never_sends_transactions(self, mock_w3, network_config, write_artifact):
        write_artifact()
        toolchain = ToolchainClient(network_config, w3=mock_w3)

        run_preflight(network_config, toolchain)

        mock_w3.eth.send_raw_transaction.assert_not_called()
        mock_w3.eth.contract.assert_not_called()

    def test_unreachable_node_fails(self, mock_w3, network_config, write_artifact):
        write_artifact()
        mock_w3.is_connected.return_value = False
        toolchain = ToolchainClient(network_config, w3=mock_w3)

        assert not run_preflight(network_config, toolchain)

        mock_w3.eth.get_balance.assert_not_called()


def load_check_system():
    """Import scripts/check_system.py (scripts/ is not a package)"""
    path = os.path.join(os.path.dirname(__file__), '..', 'scripts', 'check_system.py')
    loader_info = importlib.util.spec_from_file_location('check_system', path)
    module = importlib.util.module_from_spec(loader_info)
    loader_info.loader.exec_module(module)
    return module


class TestCheckSystemScript:
    """Test the preflight runner's exit codes"""

    @pytest.fixture
    def check_system(self, monkeypatch, tmp_path):
        module = load_check_system()
        monkeypatch.setattr(module, 'load_dotenv', lambda: None)
        monkeypatch.setenv('NETWORK_CONFIG_PATH', str(tmp_path / 'missing.json'))
        monkeypatch.setenv('ARTIFACTS_DIR', str(tmp_path / 'artifacts'))
        return module

    def test_unknown_network(self, check_system, monkeypatch, capsys):
        monkeypatch.setenv('DEPLOY_NETWORK', 'mainnet-nowhere')

        assert check_system.main() == 1
        assert 'mainnet-nowhere' in capsys.readouterr().err

    def test_all_checks_pass(self, check_system, monkeypatch, mock_w3, write_artifact):
        write_artifact()
        monkeypatch.setattr(
            check_system, 'ToolchainClient',
            lambda config: ToolchainClient(config, w3=mock_w3)
        )

        assert check_system.main() == 0

    def test_failed_check(self, check_system, monkeypatch, mock_w3):
        monkeypatch.setattr(
            check_system, 'ToolchainClient',
            lambda config: ToolchainClient(config, w3=mock_w3)
        )

        assert check_system.main() == 1
