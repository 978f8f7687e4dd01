"""Board sync orchestrator.

Receives classified webhook events and drives the ordered sequence of
GitHub calls that puts the issue or pull request in the right column:

    resolve node id -> add to board -> [fetch Status schema -> set Status]

Each step depends on the result of the previous one and a failed step
fails the whole sync; nothing is retried here because GitHub redelivers
failed webhooks. The sequence as a whole is bounded by a deadline.

The add and set-status calls are not transactional. If the process dies
between them the item stays in the board's default column until the next
delivery for the same item.
"""

import asyncio
import logging
import time
from typing import AbstractSet, Any, Awaitable, Dict, Optional, TypeVar

from project_sync.errors import (
    BoardConfigurationError,
    ProjectSyncError,
    SyncTimeoutError,
)
from project_sync.github.client import (
    STEP_ADD_TO_BOARD,
    STEP_FETCH_STATUS_SCHEMA,
    STEP_RESOLVE_ITEM,
    STEP_SET_STATUS,
    GitHubProjectsClient,
)
from project_sync.github.models import DONE_OPTION, TODO_OPTION
from project_sync.metrics import SyncMetrics
from project_sync.sync.decision import decide_sync_action
from project_sync.sync.models import SyncAction, SyncDecision, SyncOutcome
from project_sync.webhook.models import WebhookEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoardSyncOrchestrator:
    """Keeps one ProjectV2 board in step with issue and PR events.

    Accepts all dependencies via constructor injection. The orchestrator
    holds only read-only configuration, so a single instance serves every
    concurrent request.

    Attributes:
        board_client: GitHub API client for lookups and board mutations.
        project_id: Node id of the ProjectV2 board.
        tracked_repositories: Short names of repositories to sync.
        timeout_seconds: Deadline for the whole call sequence.
        set_todo_on_add: Also set Status=Todo when adding an item.
        metrics: Optional Prometheus metrics container.
    """

    def __init__(
        self,
        board_client: GitHubProjectsClient,
        project_id: str,
        tracked_repositories: AbstractSet[str],
        timeout_seconds: float = 10.0,
        set_todo_on_add: bool = False,
        metrics: Optional[SyncMetrics] = None,
    ):
        self.board_client = board_client
        self.project_id = project_id
        self.tracked_repositories = frozenset(tracked_repositories)
        self.timeout_seconds = timeout_seconds
        self.set_todo_on_add = set_todo_on_add
        self.metrics = metrics

    async def sync(self, envelope: WebhookEnvelope) -> SyncOutcome:
        """Apply a webhook event to the board.

        Args:
            envelope: The classified webhook event.

        Returns:
            SyncOutcome describing what was done. Ignored events return
            ``handled=False`` without any remote call.

        Raises:
            RemoteAPIError: If a GitHub call fails.
            BoardConfigurationError: If the board lacks the target Status.
            SyncTimeoutError: If the sequence exceeds ``timeout_seconds``.
        """
        decision = decide_sync_action(envelope, self.tracked_repositories)

        if decision.action is SyncAction.IGNORE:
            logger.info(
                "Ignoring event: %s",
                decision.reason,
                extra={
                    "repository": envelope.repository_full_name,
                    "item_number": envelope.item_number,
                    "action": envelope.action,
                },
            )
            return SyncOutcome(
                handled=False,
                action=decision.action,
                detail=decision.reason,
            )

        context: Dict[str, Any] = {
            "repository": envelope.repository_full_name,
            "item_number": envelope.item_number,
            "decision": decision.action.value,
            "step": None,
        }
        logger.info(
            "Syncing %s: %s",
            envelope.item_id,
            decision.reason,
            extra={"repository": context["repository"], "item_number": context["item_number"]},
        )

        started = time.monotonic()
        try:
            return await asyncio.wait_for(
                self._execute(envelope, decision, context),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            error = SyncTimeoutError(
                f"Sync of {envelope.item_id} exceeded {self.timeout_seconds}s",
                step=context["step"],
            )
            self._log_failure(error, context)
            raise error from exc
        finally:
            if self.metrics is not None:
                self.metrics.sync_duration_seconds.observe(time.monotonic() - started)

    async def _execute(
        self,
        envelope: WebhookEnvelope,
        decision: SyncDecision,
        context: Dict[str, Any],
    ) -> SyncOutcome:
        """Run resolve -> add -> optional status change, strictly in order."""
        ref = await self._step(
            STEP_RESOLVE_ITEM,
            context,
            self.board_client.resolve_item(envelope.item_html_url),
        )
        item_id = await self._step(
            STEP_ADD_TO_BOARD,
            context,
            self.board_client.add_to_board(self.project_id, ref.content_node_id),
        )

        if decision.action is SyncAction.MOVE_TO_DONE:
            await self._set_status(item_id, DONE_OPTION, context)
            detail = f"{envelope.item_id} moved to {DONE_OPTION}"
        elif self.set_todo_on_add:
            await self._set_status(item_id, TODO_OPTION, context)
            detail = f"{envelope.item_id} added as {TODO_OPTION}"
        else:
            detail = f"{envelope.item_id} added to board"

        logger.info(
            detail,
            extra={
                "repository": context["repository"],
                "item_number": context["item_number"],
                "item_id": item_id,
            },
        )
        return SyncOutcome(
            handled=True,
            action=decision.action,
            detail=detail,
            item_id=item_id,
        )

    async def _set_status(
        self,
        item_id: str,
        status_name: str,
        context: Dict[str, Any],
    ) -> None:
        """Look up the Status option by name on the live schema, then set it."""
        schema = await self._step(
            STEP_FETCH_STATUS_SCHEMA,
            context,
            self.board_client.fetch_status_schema(self.project_id),
        )

        option_id = schema.option_id(status_name)
        if option_id is None:
            error = BoardConfigurationError(
                f"Status option '{status_name}' not found on project "
                f"{self.project_id} (options: {sorted(schema.option_id_by_name)})",
                step=STEP_FETCH_STATUS_SCHEMA,
            )
            self._log_failure(error, context)
            raise error

        await self._step(
            STEP_SET_STATUS,
            context,
            self.board_client.set_status(
                self.project_id, item_id, schema.field_id, option_id
            ),
        )

    async def _step(
        self,
        step: str,
        context: Dict[str, Any],
        call: Awaitable[T],
    ) -> T:
        """Await one remote call, recording the step for failure reports."""
        context["step"] = step
        try:
            return await call
        except ProjectSyncError as exc:
            if exc.step is None:
                exc.step = step
            self._log_failure(exc, context)
            raise

    def _log_failure(self, error: ProjectSyncError, context: Dict[str, Any]) -> None:
        step = error.step or context.get("step")
        logger.error(
            "Sync failed [%s] at step %s for %s#%s (%s): %s",
            error.kind,
            step,
            context.get("repository"),
            context.get("item_number"),
            context.get("decision"),
            error.message,
            extra={
                "error_kind": error.kind,
                "step": step,
                "repository": context.get("repository"),
                "item_number": context.get("item_number"),
                "decision": context.get("decision"),
            },
        )
        if self.metrics is not None:
            self.metrics.record_failure(step, error.kind)
