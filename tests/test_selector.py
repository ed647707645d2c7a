"""
Tests for additional stack selection.
"""

import pytest

from additional_stacks.config import (
    DeployPhase,
    OperationContext,
    Purpose,
    make_collection,
)
from additional_stacks.deployment.selector import select_stacks
from additional_stacks.errors import ConfigurationError, SelectionEmptyError


@pytest.fixture
def stacks():
    return make_collection(
        {
            "db": {"Resources": {}},
            "queues": {"Resources": {}, "Deploy": "Before"},
            "alarms": {"Resources": {}, "Deploy": "After"},
        }
    )


class TestSelectStacks:
    """Test select_stacks."""

    def test_no_stacks_configured(self) -> None:
        """Test an empty collection is a configuration error."""
        with pytest.raises(ConfigurationError, match="No Additional Stacks are defined"):
            select_stacks(make_collection({}), Purpose.DEPLOY, OperationContext())

    @pytest.mark.parametrize("purpose", [Purpose.DEPLOY, Purpose.DESCRIBE])
    def test_unfiltered_returns_all(self, stacks, purpose: Purpose) -> None:
        """Test deploy and describe select everything without a filter."""
        selected = select_stacks(stacks, purpose, OperationContext(purpose=purpose))

        assert selected == dict(stacks)

    @pytest.mark.parametrize("purpose", list(Purpose))
    @pytest.mark.parametrize("key", ["db", "queues", "alarms"])
    def test_single_stack(self, stacks, purpose: Purpose, key: str) -> None:
        """Test a stack filter selects exactly that stack."""
        selected = select_stacks(stacks, purpose, OperationContext(purpose=purpose, stack=key))

        assert list(selected) == [key]
        assert selected[key] is stacks[key]

    def test_unknown_stack(self, stacks) -> None:
        """Test filtering on an unknown name leaves nothing."""
        with pytest.raises(SelectionEmptyError, match="Nothing to deploy"):
            select_stacks(stacks, Purpose.DEPLOY, OperationContext(stack="missing"))

    def test_remove_requires_opt_in(self, stacks) -> None:
        """Test remove without a stack name or all flag selects nothing."""
        with pytest.raises(SelectionEmptyError) as exc_info:
            select_stacks(stacks, Purpose.REMOVE, OperationContext(purpose=Purpose.REMOVE))

        assert exc_info.value.purpose == "remove"
        assert str(exc_info.value) == "Nothing to remove. Check your stack name"

    def test_remove_all(self, stacks) -> None:
        """Test the all flag selects every stack for removal."""
        selected = select_stacks(
            stacks, Purpose.REMOVE, OperationContext(purpose=Purpose.REMOVE, all=True)
        )
        assert set(selected) == {"db", "queues", "alarms"}

    def test_all_flag_with_stack_filter(self, stacks) -> None:
        """Test the stack filter still applies when all is set."""
        selected = select_stacks(
            stacks, Purpose.REMOVE, OperationContext(purpose=Purpose.REMOVE, stack="db", all=True)
        )
        assert list(selected) == ["db"]

    def test_deploy_phase(self, stacks) -> None:
        """Test deploy phases split stacks before/after the main deployment."""
        before = select_stacks(stacks, Purpose.DEPLOY, OperationContext(phase=DeployPhase.BEFORE))
        after = select_stacks(stacks, Purpose.DEPLOY, OperationContext(phase=DeployPhase.AFTER))

        assert set(before) == {"db", "queues"}
        assert set(after) == {"alarms"}

    def test_phase_ignored_for_describe(self, stacks) -> None:
        """Test phases only filter deployments."""
        selected = select_stacks(
            stacks,
            Purpose.DESCRIBE,
            OperationContext(purpose=Purpose.DESCRIBE, phase=DeployPhase.AFTER),
        )
        assert len(selected) == 3

    def test_source_not_mutated(self, stacks) -> None:
        """Test selection returns a new mapping."""
        selected = select_stacks(stacks, Purpose.DEPLOY, OperationContext(stack="db"))
        selected.clear()

        assert len(stacks) == 3

    def test_invalid_deploy_phase(self) -> None:
        """Test an unknown Deploy value surfaces as a configuration error."""
        stacks = make_collection({"db": {"Deploy": "During"}})

        with pytest.raises(ConfigurationError, match="Invalid Deploy value"):
            select_stacks(stacks, Purpose.DEPLOY, OperationContext(phase=DeployPhase.AFTER))
