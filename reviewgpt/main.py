"""Lambda entry point for the reviewgpt webhook."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from reviewgpt import __version__
from reviewgpt.tools.github import GitHubToolError, create_github_client
from reviewgpt.utils.config_loader import ConfigLoaderError, get_config
from reviewgpt.utils.logging import configure_logging, get_logger
from reviewgpt.webhook.handler import WebhookHandler
from reviewgpt.webhook.pull_request import PullRequestEventHandler, ReviewStatus
from reviewgpt.webhook.validators import WebhookSignatureError, verify_webhook_signature

if TYPE_CHECKING:
    from reviewgpt.models.config import AppConfig
    from reviewgpt.models.pull_request import PullRequest

# Configure logging on module load
configure_logging()
logger = get_logger("main")


def trigger_review(pr: PullRequest, config: AppConfig) -> ReviewStatus:
    """Review the given pull request and post the result.

    Args:
        pr: The pull request to review.
        config: Application configuration.

    Returns:
        The review outcome.

    Raises:
        GitHubToolError: If GitHub cannot be reached for this installation.
    """
    logger.info(
        "Review triggered",
        extra={
            "pr_number": pr.number,
            "repository": pr.repository,
            "action": pr.action,
            "head_sha": pr.head_sha,
        },
    )

    github_client = create_github_client(pr.installation_id, config.github)
    return PullRequestEventHandler(config, github_client).handle(pr)


def _create_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    """Create a Lambda response.

    Args:
        status_code: HTTP status code.
        body: Response body dictionary.

    Returns:
        Lambda response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": json.dumps(body),
    }


def _error_response(status_code: int, error: str, message: str) -> dict[str, Any]:
    return _create_response(status_code, {"error": error, "message": message})


def _handle_webhook(event: dict[str, Any], config: AppConfig) -> dict[str, Any]:  # noqa: PLR0911
    """Handle a webhook request.

    Args:
        event: Lambda event from API Gateway.
        config: Application configuration.

    Returns:
        Lambda response dictionary.
    """
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}

    event_type = headers.get("x-github-event", "")
    delivery_id = headers.get("x-github-delivery", "")
    signature = headers.get("x-hub-signature-256", "")

    logger.info(
        "Received webhook",
        extra={"event_type": event_type, "delivery_id": delivery_id},
    )

    if not config.github.webhook_secret:
        logger.error("GITHUB_WEBHOOK_SECRET not configured")
        return _error_response(500, "configuration_error", "Webhook secret not configured")

    body = event.get("body") or ""

    try:
        verify_webhook_signature(body, signature, config.github.webhook_secret)
    except WebhookSignatureError as e:
        logger.warning("Signature verification failed", extra={"error": str(e)})
        return _error_response(403, "invalid_signature", str(e))

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON payload", extra={"error": str(e)})
        return _error_response(400, "invalid_payload", f"Invalid JSON: {e}")

    if not isinstance(payload, dict):
        return _error_response(400, "invalid_payload", "Payload must be a JSON object")

    result = WebhookHandler().dispatch(event_type, payload)

    if result.error is not None:
        return _error_response(400, "invalid_payload", result.error)

    if result.should_review and result.pull_request is not None:
        pr = result.pull_request
        try:
            status = trigger_review(pr, config)
        except GitHubToolError as e:
            logger.error("GitHub access failed", extra={"pr_number": pr.number, "error": str(e)})
            return _error_response(500, "github_error", str(e))
        except Exception as e:
            logger.error("Failed to review PR", extra={"pr_number": pr.number, "error": str(e)})
            return _error_response(500, "internal_error", "Failed to review pull request")

        return _create_response(
            200,
            {
                "status": "reviewed",
                "review_status": status.value,
                "message": f"PR #{pr.number}: {status.value}",
            },
        )

    if result.event_type == "ping":
        return _create_response(200, {"status": "ok", "message": f"Pong! {result.detail}"})

    if result.event_type == "installation":
        return _create_response(
            200,
            {"status": "ok", "message": f"Installation event processed: {result.action}"},
        )

    if result.event_type == "pull_request":
        message = f"Action '{result.action}' does not trigger review"
    else:
        message = f"Event type '{event_type}' not handled"

    return _create_response(200, {"status": "ignored", "message": message})


def _handle_health() -> dict[str, Any]:
    """Handle health check request.

    Returns:
        Lambda response dictionary.
    """
    return _create_response(
        200,
        {
            "status": "healthy",
            "version": __version__,
        },
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:  # noqa: ARG001
    """AWS Lambda handler for webhook requests.

    Args:
        event: Lambda event from API Gateway.
        context: Lambda context (unused but required by AWS Lambda).

    Returns:
        Lambda response dictionary.
    """
    path = event.get("path", "")
    method = event.get("httpMethod", "")

    logger.info(
        "Request received",
        extra={"path": path, "method": method},
    )

    if path == "/health" and method == "GET":
        return _handle_health()

    if path == "/webhook" and method == "POST":
        try:
            config = get_config()
        except ConfigLoaderError as e:
            logger.error("Invalid configuration", extra={"error": str(e)})
            return _error_response(500, "configuration_error", str(e))
        return _handle_webhook(event, config)

    return _error_response(404, "not_found", f"Path not found: {method} {path}")


def create_dev_app() -> Any:
    """Build a Starlette app that forwards requests to ``lambda_handler``."""
    from starlette.applications import Starlette  # noqa: PLC0415
    from starlette.requests import Request  # noqa: PLC0415, TC002
    from starlette.responses import JSONResponse  # noqa: PLC0415
    from starlette.routing import Route  # noqa: PLC0415

    async def webhook_route(request: Request) -> JSONResponse:
        body = await request.body()
        event = {
            "httpMethod": "POST",
            "path": "/webhook",
            "headers": dict(request.headers),
            "body": body.decode(),
        }
        response = lambda_handler(event, None)
        return JSONResponse(
            content=json.loads(response["body"]),
            status_code=response["statusCode"],
        )

    async def health_route(request: Request) -> JSONResponse:
        del request  # unused but required by Starlette routing
        response = lambda_handler({"httpMethod": "GET", "path": "/health"}, None)
        return JSONResponse(
            content=json.loads(response["body"]),
            status_code=response["statusCode"],
        )

    return Starlette(
        routes=[
            Route("/webhook", webhook_route, methods=["POST"]),
            Route("/health", health_route, methods=["GET"]),
        ]
    )


# For local development
if __name__ == "__main__":
    import uvicorn

    configure_logging(get_config().log_level)
    logger.info("Starting reviewgpt", extra={"version": __version__})
    uvicorn.run(create_dev_app(), host="0.0.0.0", port=8000)
