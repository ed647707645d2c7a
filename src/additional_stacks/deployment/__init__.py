"""
Orchestration of additional stack deployments.
"""

from .orchestrator import Orchestrator
from .selector import select_stacks

__all__ = ["Orchestrator", "select_stacks"]
