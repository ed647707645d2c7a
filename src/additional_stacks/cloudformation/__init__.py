"""
CloudFormation stack management for additional stacks.
"""

from .client import ProvisioningClient
from .poller import StatusPoller
from .stack_manager import StackOperator
from .template import build_template, template_body

__all__ = [
    "ProvisioningClient",
    "StackOperator",
    "StatusPoller",
    "build_template",
    "template_body",
]
