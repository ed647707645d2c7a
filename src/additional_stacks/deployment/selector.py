"""
Selection of the stacks an invocation operates on.
"""

from typing import Dict

from ..config import OperationContext, Purpose, StackCollection, StackDefinition
from ..errors import ConfigurationError, SelectionEmptyError


def select_stacks(
    stacks: StackCollection, purpose: Purpose, context: OperationContext
) -> Dict[str, StackDefinition]:
    """Filter the configured stacks for a deploy, remove or describe.

    Removing requires either a single stack name or the ``all`` flag, so a
    bare remove never touches every stack.

    Args:
        stacks: All configured stacks
        purpose: What the selection is for
        context: Invocation parameters (stack filter, all flag, deploy phase)

    Returns:
        A new mapping of the selected stacks

    Raises:
        ConfigurationError: no stacks are configured
        SelectionEmptyError: nothing is left after filtering
    """
    if len(stacks) == 0:
        raise ConfigurationError(
            "No Additional Stacks are defined. Add one to custom.additionalStacks section"
        )

    selected = dict(stacks)

    if context.stack is not None:
        selected = {k: v for k, v in selected.items() if k == context.stack}

    if purpose is Purpose.REMOVE and context.stack is None and not context.all:
        selected = {}

    if purpose is Purpose.DEPLOY and context.phase is not None:
        selected = {k: v for k, v in selected.items() if v.phase is context.phase}

    if not selected:
        raise SelectionEmptyError(purpose.value)

    return selected
