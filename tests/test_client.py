"""
Tests for the CloudFormation provisioning client.
"""

from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from additional_stacks.cloudformation.client import CAPABILITIES, ProvisioningClient


class TestProvisioningClient:
    """Test ProvisioningClient."""

    def create_client(self) -> ProvisioningClient:
        """Create a client with a mocked CloudFormation client."""
        return ProvisioningClient(region="us-east-1", cloudformation=Mock())

    def test_session_setup(self) -> None:
        """Test the boto3 session uses region and profile."""
        with patch("boto3.Session") as mock_session:
            client = ProvisioningClient(region="eu-west-1", profile="deployer")

        mock_session.assert_called_once_with(region_name="eu-west-1", profile_name="deployer")
        mock_session.return_value.client.assert_called_once_with("cloudformation")
        assert client.cloudformation == mock_session.return_value.client.return_value

    def test_session_default_region(self) -> None:
        """Test the default region without a profile."""
        with patch("boto3.Session") as mock_session:
            ProvisioningClient()

        mock_session.assert_called_once_with(region_name="us-east-1")

    def test_describe_exists(self) -> None:
        """Test describing an existing stack."""
        client = self.create_client()
        client.cloudformation.describe_stacks.return_value = {
            "Stacks": [{"StackName": "svc-dev-db", "StackStatus": "CREATE_COMPLETE"}]
        }

        description = client.describe("svc-dev-db")

        assert description["StackStatus"] == "CREATE_COMPLETE"
        client.cloudformation.describe_stacks.assert_called_once_with(StackName="svc-dev-db")

    def test_describe_not_exists(self) -> None:
        """Test a missing stack is described as None."""
        client = self.create_client()
        client.cloudformation.describe_stacks.side_effect = ClientError(
            {"Error": {"Code": "ValidationError", "Message": "Stack with id svc-dev-db does not exist"}},
            "DescribeStacks",
        )

        assert client.describe("svc-dev-db") is None

    def test_describe_empty_response(self) -> None:
        """Test an empty Stacks list is described as None."""
        client = self.create_client()
        client.cloudformation.describe_stacks.return_value = {"Stacks": []}

        assert client.describe("svc-dev-db") is None

    def test_describe_other_error(self) -> None:
        """Test other describe failures propagate."""
        client = self.create_client()
        error = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "User is not authorized"}},
            "DescribeStacks",
        )
        client.cloudformation.describe_stacks.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            client.describe("svc-dev-db")
        assert exc_info.value is error

    def test_create(self) -> None:
        """Test create requests a rollback on failure."""
        client = self.create_client()
        tags = [{"Key": "STAGE", "Value": "dev"}]

        client.create("svc-dev-db", "{}", tags)

        client.cloudformation.create_stack.assert_called_once_with(
            StackName="svc-dev-db",
            TemplateBody="{}",
            Capabilities=CAPABILITIES,
            OnFailure="ROLLBACK",
            Parameters=[],
            Tags=tags,
        )

    def test_update_has_no_on_failure(self) -> None:
        """Test update does not send OnFailure."""
        client = self.create_client()

        client.update("svc-dev-db", "{}", [])

        kwargs = client.cloudformation.update_stack.call_args[1]
        assert "OnFailure" not in kwargs
        assert kwargs["Capabilities"] == ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]

    def test_delete(self) -> None:
        """Test deleting a stack."""
        client = self.create_client()

        client.delete("svc-dev-db")

        client.cloudformation.delete_stack.assert_called_once_with(StackName="svc-dev-db")
