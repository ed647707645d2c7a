"""
Additional stack create/update/delete operations.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..config import OperationContext, Settings, StackDefinition
from ..errors import ErrorKind, classify_error
from .client import ProvisioningClient
from .poller import StatusPoller
from .template import build_template, template_body

logger = logging.getLogger(__name__)


class StackOperator:
    """Run the lifecycle of a single additional stack."""

    def __init__(
        self,
        settings: Settings,
        client: ProvisioningClient,
        poller: StatusPoller,
        log: Callable[[str], None],
    ):
        self.settings = settings
        self.client = client
        self.poller = poller
        self.log = log
        self._clients: Dict[str, ProvisioningClient] = {client.region: client}
        self._clients_lock = threading.Lock()

    def client_for(self, context: OperationContext) -> ProvisioningClient:
        """Get the client for the context's region, creating it on first use."""
        region = context.region or self.client.region
        with self._clients_lock:
            client = self._clients.get(region)
            if client is None:
                logger.debug(f"Creating CloudFormation client for {region}")
                client = ProvisioningClient(region=region, profile=self.client.profile)
                self._clients[region] = client
            return client

    def full_name(
        self, stack_name: str, stack: StackDefinition, context: OperationContext
    ) -> str:
        """Resolve the CloudFormation stack name of an additional stack."""
        if stack.stack_name:
            return stack.stack_name
        return f"{self.settings.get_stack_name(context.stage)}-{stack_name}"

    def stack_tags(
        self, stack: StackDefinition, context: OperationContext
    ) -> List[Dict[str, str]]:
        """Compose the tags sent with create/update requests."""
        tags: Dict[str, Any] = {
            "STAGE": context.stage or self.settings.stage,
            **(stack.tags or {}),
        }
        return [{"Key": key, "Value": str(value)} for key, value in tags.items()]

    def describe(
        self, stack_name: str, stack: StackDefinition, context: OperationContext
    ) -> Optional[Dict[str, Any]]:
        """Describe a stack, returning None if it does not exist."""
        return self.client_for(context).describe(self.full_name(stack_name, stack, context))

    def create_or_update(
        self, stack_name: str, stack: StackDefinition, context: OperationContext
    ) -> None:
        """Create the stack if it does not exist yet, otherwise update it."""
        full_name = self.full_name(stack_name, stack, context)
        client = self.client_for(context)
        try:
            description = client.describe(full_name)
            tags = self.stack_tags(stack, context)
            body = template_body(build_template(stack_name, stack))

            if description is None:
                logger.info(f"Creating stack {full_name}")
                client.create(full_name, body, tags, on_failure="ROLLBACK")
            else:
                logger.info(f"Updating stack {full_name} ({description.get('StackStatus')})")
                client.update(full_name, body, tags)

            self.poller.wait(stack_name, full_name, client)

            self.log(f'Additional Stack "{stack_name}" successfully created/updated!')
        except Exception as e:
            kind = classify_error(e)
            if kind is ErrorKind.ROLLBACK_COMPLETE:
                self._log_rollback_complete(stack_name)
                return
            if kind is ErrorKind.NO_UPDATES:
                self.log(f'Additional stack "{stack_name}" has not changed.')
                return
            raise

    def delete(
        self, stack_name: str, stack: StackDefinition, context: OperationContext
    ) -> None:
        """Delete the stack and wait until it is gone."""
        full_name = self.full_name(stack_name, stack, context)
        client = self.client_for(context)
        try:
            logger.info(f"Deleting stack {full_name}")
            client.delete(full_name)

            self.poller.wait(stack_name, full_name, client)
        except Exception as e:
            if classify_error(e) is ErrorKind.ROLLBACK_COMPLETE:
                self._log_rollback_complete(stack_name)
                return
            raise

    def _log_rollback_complete(self, stack_name: str) -> None:
        self.log(
            f'IMPORTANT! Additional stack "{stack_name}" '
            'is in "ROLLBACK_COMPLETE" state. The only way forward is '
            "to delete it as it has never finished creation."
        )
