"""
Stack status polling.
"""

import logging
import threading
from typing import Callable, Optional

from ..config import DEFAULT_POLL_INTERVAL
from ..errors import ErrorKind, OperationCancelled, StackFailedError, classify_error
from .client import ProvisioningClient

logger = logging.getLogger(__name__)

IN_PROGRESS_STATUSES = frozenset(
    [
        "CREATE_IN_PROGRESS",
        "DELETE_IN_PROGRESS",
        "REVIEW_IN_PROGRESS",
        "ROLLBACK_IN_PROGRESS",
        "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS",
        "UPDATE_IN_PROGRESS",
        "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS",
        "UPDATE_ROLLBACK_IN_PROGRESS",
    ]
)

FAILED_STATUSES = frozenset(
    [
        "CREATE_FAILED",
        "DELETE_FAILED",
        "ROLLBACK_FAILED",
        "ROLLBACK_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
        "UPDATE_ROLLBACK_FAILED",
    ]
)


class StatusPoller:
    """Wait for a stack to leave its in-progress states."""

    def __init__(
        self,
        client: ProvisioningClient,
        log: Callable[[str], None],
        interval: float = DEFAULT_POLL_INTERVAL,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the poller.

        Args:
            client: Provisioning client used for describe calls
            log: Sink for progress messages
            interval: Seconds to wait between polls
            stop_event: Event that aborts any pending wait when set
        """
        self.client = client
        self.log = log
        self.interval = interval
        self.stop_event = stop_event or threading.Event()

    def sleep(self) -> None:
        """Wait one interval, raising OperationCancelled if stopped meanwhile."""
        if self.stop_event.wait(self.interval):
            raise OperationCancelled("Stopped while waiting for stack status")

    def wait(
        self,
        stack_name: str,
        full_name: str,
        client: Optional[ProvisioningClient] = None,
    ) -> None:
        """Poll until the stack reaches a terminal state.

        Returns when the stack is gone or settled in a non-failed status.
        There is no attempt limit; only a terminal status (or the stop
        event) ends the loop.

        Args:
            stack_name: Logical key used in progress messages
            full_name: CloudFormation stack name
            client: Client for the stack's region (defaults to the poller's)

        Raises:
            StackFailedError: the stack ended in a failed status
            OperationCancelled: the stop event was set during a wait
        """
        client = client or self.client
        polls = 0
        while True:
            if self.stop_event.is_set():
                raise OperationCancelled("Stopped while waiting for stack status")

            try:
                description = client.describe(full_name)
            except Exception as e:
                if classify_error(e) is ErrorKind.RATE_EXCEEDED:
                    logger.debug(f"Rate exceeded describing {full_name}, retrying")
                    self.sleep()
                    continue
                raise

            polls += 1
            if description is None:
                self.log(f'Additional stack "{stack_name}" removed successfully.')
                return

            status = description.get("StackStatus")
            logger.debug(f"{full_name} poll #{polls}: {status}")

            if status in IN_PROGRESS_STATUSES:
                self.log(f'Waiting for "{stack_name}" status update...')
                self.sleep()
                continue

            if status in FAILED_STATUSES:
                raise StackFailedError(stack_name, status)

            self.log(f'Additional stack "{stack_name}" ({status}).')
            return
