"""FastAPI application entry point for GitHub project sync.

This module provides the FastAPI application that receives GitHub webhooks
and keeps the project board in sync. Request handling is:

    verify signature -> classify event -> orchestrator (filter, decide, sync)

Every ProjectSyncError raised along the way is turned into a JSON error
response with the status code its class declares; ignored events answer
200. Settings and the orchestrator are built once in the lifespan handler
and reached through ``app.state``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from project_sync.config import SyncSettings, get_settings
from project_sync.errors import ProjectSyncError, SignatureVerificationError
from project_sync.github.client import GitHubProjectsClient
from project_sync.metrics import SyncMetrics
from project_sync.orchestrator import BoardSyncOrchestrator
from project_sync.sync.models import SyncAction, SyncOutcome
from project_sync.webhook.handler import (
    EVENT_HEADER,
    classify_event,
    event_kind_for_header,
)
from project_sync.webhook.signature import SIGNATURE_HEADER, verify_signature

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
WEBHOOK_PATH = "/webhook/github"
DELIVERY_HEADER = "X-GitHub-Delivery"
UNVERIFIED_EVENT_LABEL = "unverified"

logger = logging.getLogger(__name__)

router = APIRouter()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: SyncSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Project sync configuration:")
    logger.info(f"  GitHub API URL: {settings.github_api_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(f"  Webhook Secret: {_redact_secret(settings.webhook_secret)}")
    logger.info(f"  Project ID: {settings.project_id}")
    logger.info(
        f"  Tracked Repositories: {', '.join(sorted(settings.tracked_repositories))}"
    )
    logger.info(f"  Sync Timeout Seconds: {settings.sync_timeout_seconds}")
    logger.info(f"  HTTP Timeout Seconds: {settings.http_timeout_seconds}")
    logger.info(f"  Set Todo On Add: {settings.set_todo_on_add}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


def create_app(
    settings: Optional[SyncSettings] = None,
    board_client: Optional[GitHubProjectsClient] = None,
    metrics: Optional[SyncMetrics] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use. Read from the environment at startup
                  when omitted.
        board_client: GitHub client to use. Built from settings when
                      omitted.
        metrics: Metrics container. A fresh one (with its own registry) is
                 created when omitted.

    Returns:
        FastAPI: The configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings if settings is not None else get_settings()
        configure_logging(cfg.log_level)
        logger.info("Project sync starting up...")
        _log_configuration(cfg)

        client = board_client
        if client is None:
            client = GitHubProjectsClient(
                token=cfg.github_token,
                base_url=cfg.github_api_url,
                timeout=cfg.http_timeout_seconds,
            )

        app.state.settings = cfg
        app.state.orchestrator = BoardSyncOrchestrator(
            board_client=client,
            project_id=cfg.project_id,
            tracked_repositories=cfg.tracked_repositories,
            timeout_seconds=cfg.sync_timeout_seconds,
            set_todo_on_add=cfg.set_todo_on_add,
            metrics=app.state.metrics,
        )

        logger.info("Project sync started successfully")

        yield

        logger.info("Project sync shutting down...")
        await client.close()

    app = FastAPI(
        title="GitHub Project Sync",
        description="Keeps a GitHub Projects board in sync with issues and pull requests",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.metrics = metrics if metrics is not None else SyncMetrics()
    app.add_exception_handler(ProjectSyncError, _project_sync_error_handler)
    app.include_router(router)
    return app


async def _project_sync_error_handler(request: Request, exc: ProjectSyncError) -> JSONResponse:
    """Convert a ProjectSyncError into its HTTP response."""
    logger.warning(
        "Responding %s [%s]: %s",
        exc.status_code,
        exc.kind,
        exc.message,
        extra={
            "error_kind": exc.kind,
            "step": exc.step,
            "delivery": request.headers.get(DELIVERY_HEADER),
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.kind, "detail": exc.message},
    )


@router.get("/health")
async def health():
    """Liveness probe endpoint.

    Returns:
        dict: Status indicating the application is healthy.
    """
    return {"status": "ok"}


@router.get("/metrics")
async def metrics(request: Request):
    """Prometheus metrics endpoint."""
    return Response(
        content=request.app.state.metrics.generate(),
        media_type=CONTENT_TYPE_LATEST,
    )


@router.post(WEBHOOK_PATH)
async def github_webhook(request: Request):
    """GitHub webhook receiver endpoint.

    The signature is checked against the raw body before anything is
    parsed.

    Returns:
        dict: ``added``/``done`` with the board item id, or ``ignored``
              with the reason.
    """
    settings: SyncSettings = request.app.state.settings
    sync_metrics: SyncMetrics = request.app.state.metrics
    orchestrator: BoardSyncOrchestrator = request.app.state.orchestrator

    event = request.headers.get(EVENT_HEADER, "")
    delivery = request.headers.get(DELIVERY_HEADER)
    raw_body = await request.body()

    # Metric labels come from a closed set; header values are untrusted.
    event_label = UNVERIFIED_EVENT_LABEL
    try:
        if not verify_signature(
            raw_body,
            request.headers.get(SIGNATURE_HEADER),
            settings.webhook_secret.encode("utf-8"),
        ):
            logger.warning(
                "Invalid webhook signature",
                extra={"event": event, "delivery": delivery},
            )
            raise SignatureVerificationError("Invalid or missing webhook signature")

        event_label = event_kind_for_header(event).value
        envelope = classify_event(raw_body, event)
        outcome = await orchestrator.sync(envelope)
    except ProjectSyncError as exc:
        sync_metrics.record_webhook(event_label, exc.kind)
        raise

    sync_metrics.record_webhook(event_label, "handled" if outcome.handled else "ignored")
    return _outcome_body(outcome)


def _outcome_body(outcome: SyncOutcome) -> dict:
    if not outcome.handled:
        return {"status": "ignored", "reason": outcome.detail}
    status = "done" if outcome.action is SyncAction.MOVE_TO_DONE else "added"
    return {"status": status, "item_id": outcome.item_id}


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
