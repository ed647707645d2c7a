"""
Deploy, remove and describe all selected additional stacks.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Optional

from ..cloudformation import ProvisioningClient, StackOperator, StatusPoller
from ..config import (
    DEFAULT_CONCURRENCY,
    OperationContext,
    Purpose,
    Settings,
    StackCollection,
    StackDefinition,
)
from ..errors import ConfigurationError, ProviderError, error_message
from .selector import select_stacks

logger = logging.getLogger(__name__)

LogSink = Callable[[str], None]
StackOperation = Callable[[str, StackDefinition], Any]


def default_log_sink() -> LogSink:
    return logging.getLogger("additional_stacks").info


class Orchestrator:
    """Entry points for operating on the configured additional stacks.

    Entry points never raise: selection problems and per-stack failures are
    reported through the log sink, and one stack failing does not stop the
    others.
    """

    def __init__(
        self,
        stacks: StackCollection,
        operator: StackOperator,
        log: Optional[LogSink] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            stacks: All configured stacks
            operator: Runs the per-stack lifecycle
            log: Sink for user-facing messages
            concurrency: Default maximum number of stacks processed at once
            stop_event: Event shared with the poller to abandon pending waits
        """
        self.stacks = stacks
        self.operator = operator
        self.log = log or default_log_sink()
        self.concurrency = concurrency
        self.stop_event = stop_event or threading.Event()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        log: Optional[LogSink] = None,
        region: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "Orchestrator":
        """Wire an orchestrator with a boto3-backed client."""
        log = log or default_log_sink()
        stop_event = threading.Event()
        client = ProvisioningClient(
            region=region or settings.region, profile=profile or settings.profile
        )
        poller = StatusPoller(
            client, log, interval=settings.poll_interval, stop_event=stop_event
        )
        operator = StackOperator(settings, client, poller, log)
        return cls(
            settings.stacks,
            operator,
            log=log,
            concurrency=settings.concurrency,
            stop_event=stop_event,
        )

    def cancel(self) -> None:
        """Abandon all pending status waits."""
        self.stop_event.set()

    def deploy(self, context: OperationContext) -> None:
        """Create or update every selected stack."""
        if context.skip:
            return

        stacks = self._select(Purpose.DEPLOY, context)
        if stacks is None:
            return

        self.log("Deploying additional stacks...")
        self._run(
            stacks,
            lambda name, stack: self.operator.create_or_update(name, stack, context),
            context,
        )

    def remove(self, context: OperationContext) -> None:
        """Delete every selected stack."""
        stacks = self._select(Purpose.REMOVE, context)
        if stacks is None:
            return

        self.log("Removing additional stacks...")
        self._run(
            stacks,
            lambda name, stack: self.operator.delete(name, stack, context),
            context,
        )

    def describe(self, context: OperationContext) -> None:
        """Log the current status of every selected stack."""
        stacks = self._select(Purpose.DESCRIBE, context)
        if stacks is None:
            return

        self.log("Describing additional stacks...")
        results = self._run(
            stacks,
            lambda name, stack: self.operator.describe(name, stack, context),
            context,
        )

        for name in stacks:
            if name not in results:
                continue
            result = results[name]
            if isinstance(result, Exception):
                status = f"error ({error_message(result)})"
            else:
                status = (result or {}).get("StackStatus") or "does not exist"
            self.log(f"  {name}: {status}")

    def _select(
        self, purpose: Purpose, context: OperationContext
    ) -> Optional[Dict[str, StackDefinition]]:
        try:
            return select_stacks(self.stacks, purpose, context)
        except ConfigurationError as e:
            self.log(str(e))
            return None

    def _run(
        self,
        stacks: Dict[str, StackDefinition],
        operation: StackOperation,
        context: OperationContext,
    ) -> Dict[str, Any]:
        """Run an operation over the stacks with bounded parallelism.

        Returns:
            Result or raised exception per stack name
        """
        limit = max(1, context.concurrency or self.concurrency)
        results: Dict[str, Any] = {}

        executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="additional-stack")
        try:
            future_map = {
                executor.submit(operation, name, stack): name
                for name, stack in stacks.items()
            }
            logger.debug(f"Submitted {len(future_map)} stack operations, limit {limit}")

            for future in as_completed(future_map):
                name = future_map[future]
                try:
                    results[name] = future.result()
                except ProviderError as e:
                    self._log_failure(name, e)
                    results[name] = e
                except Exception as e:
                    logger.debug(f"Stack {name} failed", exc_info=True)
                    self._log_failure(name, e)
                    results[name] = e
        except KeyboardInterrupt:
            self.cancel()
            executor.shutdown(wait=True, cancel_futures=True)
            self.log("Cancelled.")
        finally:
            executor.shutdown(wait=True)

        return results

    def _log_failure(self, name: str, error: BaseException) -> None:
        self.log(f'Additional stack "{name}" failed: {error_message(error)}')
