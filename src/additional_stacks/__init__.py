"""
Additional Stacks - deploy, describe and remove auxiliary CloudFormation stacks
alongside a primary deployment.
"""

__version__ = "1.0.0"

from .config import OperationContext, Purpose, Settings, StackDefinition, load_settings
from .deployment import Orchestrator

__all__ = [
    "OperationContext",
    "Orchestrator",
    "Purpose",
    "Settings",
    "StackDefinition",
    "load_settings",
]
