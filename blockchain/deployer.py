"""
Deployer
Deploys the CryptexSphere contract once and reports the outcome as a DeploymentResult
"""

from typing import Optional
from loguru import logger

from .errors import DeploymentError

CONTRACT_NAME = "CryptexSphere"


class DeploymentResult:
    """
    Outcome of one deployment attempt: either an address or an error
    """

    def __init__(
        self,
        contract_name: str,
        address: Optional[str] = None,
        transaction_hash: Optional[str] = None,
        error: Optional[DeploymentError] = None
    ):
        if (address is None) == (error is None):
            raise ValueError("DeploymentResult needs exactly one of address or error")

        self.contract_name = contract_name
        self.address = address
        self.transaction_hash = transaction_hash
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def success_line(self) -> str:
        """Line printed to stdout for a successful deployment"""
        return f"{self.contract_name} deployed to: {self.address}"

    def __repr__(self) -> str:
        if self.ok:
            return f"DeploymentResult(ok, address={self.address!r})"
        return f"DeploymentResult(error={self.error!r})"


class Deployer:
    """
    Resolve → deploy → wait for confirmation, once per instance

    The toolchain is injected; anything exposing get_contract_factory(name)
    whose factories return a handle with wait_for_deployment() will do.
    """

    def __init__(self, toolchain, contract_name: str = CONTRACT_NAME):
        """
        Args:
            toolchain: ToolchainClient (or a stand-in with the same methods)
            contract_name: Contract to deploy
        """
        self.toolchain = toolchain
        self.contract_name = contract_name
        self._has_run = False

    def run(self) -> DeploymentResult:
        """
        Perform the single deployment attempt

        Returns:
            DeploymentResult with the deployed address, or with the DeploymentError
        """
        if self._has_run:
            raise RuntimeError("Deployer.run() may only be called once")
        self._has_run = True

        logger.info(f"Deploying {self.contract_name}...")

        try:
            factory = self.toolchain.get_contract_factory(self.contract_name)
            pending = factory.deploy()
            deployed = pending.wait_for_deployment()
        except DeploymentError as e:
            return DeploymentResult(self.contract_name, error=e)

        logger.success(f"{self.contract_name} deployed successfully")

        return DeploymentResult(
            self.contract_name,
            address=deployed.address,
            transaction_hash=deployed.transaction_hash
        )
