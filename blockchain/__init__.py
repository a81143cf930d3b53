"""
Blockchain Deployment Package
Resolves compiled artifacts, deploys them and reports the outcome
"""

from .deployer import Deployer, DeploymentResult, CONTRACT_NAME
from .toolchain import ToolchainClient, ContractFactory, PendingDeployment
from .errors import (
    DeploymentError,
    ConfigurationError,
    ArtifactNotFound,
    SubmissionError,
    ConfirmationError
)

__all__ = [
    'Deployer',
    'DeploymentResult',
    'CONTRACT_NAME',
    'ToolchainClient',
    'ContractFactory',
    'PendingDeployment',
    'DeploymentError',
    'ConfigurationError',
    'ArtifactNotFound',
    'SubmissionError',
    'ConfirmationError'
]
