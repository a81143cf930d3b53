"""
Deployment Errors
Failure taxonomy shared by the toolchain client, the deployer and the entry point
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for every failure that aborts a deployment"""


class ConfigurationError(DeploymentError):
    """Network, signer or runtime settings are missing or invalid"""


class ArtifactNotFound(DeploymentError):
    """Contract artifact is unknown, ambiguous or not deployable"""

    def __init__(self, contract_name: str, message: str):
        self.contract_name = contract_name
        super().__init__(message)


class SubmissionError(DeploymentError):
    """Deployment transaction could not be built, signed or sent"""


class ConfirmationError(DeploymentError):
    """
    Deployment transaction was sent but did not produce a contract

    Carries the transaction hash and, when the node can provide it,
    the revert reason.
    """

    def __init__(
        self,
        message: str,
        transaction_hash: Optional[str] = None,
        revert_reason: Optional[str] = None
    ):
        self.transaction_hash = transaction_hash
        self.revert_reason = revert_reason
        super().__init__(message)
