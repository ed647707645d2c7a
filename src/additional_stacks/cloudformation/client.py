"""
CloudFormation API access.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3

from ..errors import ErrorKind, classify_error

logger = logging.getLogger(__name__)

CAPABILITIES = ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]


class ProvisioningClient:
    """Thin wrapper over the CloudFormation stack calls."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        cloudformation: Optional[Any] = None,
    ):
        """
        Initialize the client.

        Args:
            region: AWS region
            profile: AWS profile to use
            cloudformation: Preconfigured boto3 CloudFormation client
        """
        self.region = region or "us-east-1"
        self.profile = profile

        if cloudformation is None:
            session_args = {"region_name": self.region}
            if profile:
                session_args["profile_name"] = profile

            session = boto3.Session(**session_args)
            cloudformation = session.client("cloudformation")
        self.cloudformation = cloudformation

    def describe(self, stack_name: str) -> Optional[Dict[str, Any]]:
        """Get the current description of a stack, or None if it does not exist."""
        try:
            response = self.cloudformation.describe_stacks(StackName=stack_name)
        except Exception as e:
            if classify_error(e) is ErrorKind.NOT_FOUND:
                return None
            raise

        stacks = response.get("Stacks")
        if not stacks:
            return None
        return dict(stacks[0])

    def create(
        self,
        stack_name: str,
        template_body: str,
        tags: List[Dict[str, str]],
        on_failure: str = "ROLLBACK",
    ) -> Dict[str, Any]:
        """Create a stack."""
        logger.debug(f"CreateStack {stack_name} in {self.region}")
        return self.cloudformation.create_stack(
            StackName=stack_name,
            TemplateBody=template_body,
            Capabilities=CAPABILITIES,
            OnFailure=on_failure,
            Parameters=[],
            Tags=tags,
        )

    def update(
        self, stack_name: str, template_body: str, tags: List[Dict[str, str]]
    ) -> Dict[str, Any]:
        """Update a stack. UpdateStack does not accept OnFailure."""
        logger.debug(f"UpdateStack {stack_name} in {self.region}")
        return self.cloudformation.update_stack(
            StackName=stack_name,
            TemplateBody=template_body,
            Capabilities=CAPABILITIES,
            Parameters=[],
            Tags=tags,
        )

    def delete(self, stack_name: str) -> Dict[str, Any]:
        """Delete a stack."""
        logger.debug(f"DeleteStack {stack_name} in {self.region}")
        return self.cloudformation.delete_stack(StackName=stack_name)
