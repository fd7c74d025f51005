"""Webhook event parsing and dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from reviewgpt.models.pull_request import PullRequest
from reviewgpt.utils.logging import get_logger

logger = get_logger("webhook.handler")


class WebhookParseError(Exception):
    """Raised when webhook payload parsing fails."""

    pass


@dataclass
class DispatchResult:
    """What the dispatcher decided to do with an event."""

    event_type: str
    status: str = "ok"
    action: str = ""
    should_review: bool = False
    pull_request: PullRequest | None = None
    error: str | None = None
    detail: str = ""


def parse_pr_event(payload: dict[str, Any]) -> PullRequest:
    """Parse a pull_request webhook event.

    Args:
        payload: The webhook payload.

    Returns:
        PullRequest instance.

    Raises:
        WebhookParseError: If required fields are missing or invalid.
    """
    for key in ("pull_request", "installation", "repository"):
        if key not in payload:
            raise WebhookParseError(f"Missing '{key}' in payload")

    try:
        return PullRequest.from_webhook_payload(payload)
    except KeyError as e:
        raise WebhookParseError(f"Missing required field: {e}") from e
    except (TypeError, ValueError) as e:
        raise WebhookParseError(f"Invalid field value: {e}") from e


class WebhookHandler:
    """Dispatches GitHub webhook events by type."""

    # Actions that should trigger a review
    REVIEW_ACTIONS: ClassVar[frozenset[str]] = frozenset({"opened", "synchronize"})

    def dispatch(self, event_type: str, payload: dict[str, Any]) -> DispatchResult:
        """Dispatch a webhook event to the appropriate handler.

        Args:
            event_type: The X-GitHub-Event header value.
            payload: The webhook payload.

        Returns:
            DispatchResult for the event.
        """
        logger.info(
            "Dispatching webhook event",
            extra={"event_type": event_type, "action": payload.get("action")},
        )

        if event_type == "pull_request":
            return self._handle_pull_request(payload)
        if event_type == "ping":
            return self._handle_ping(payload)
        if event_type == "installation":
            return self._handle_installation(payload)

        logger.info("Ignoring unsupported event type", extra={"event_type": event_type})
        return DispatchResult(event_type=event_type, status="ignored")

    def _handle_pull_request(self, payload: dict[str, Any]) -> DispatchResult:
        action = payload.get("action", "")
        result = DispatchResult(event_type="pull_request", action=action)

        if action not in self.REVIEW_ACTIONS:
            logger.info("PR action does not require review", extra={"action": action})
            result.status = "ignored"
            return result

        try:
            pr = parse_pr_event(payload)
        except WebhookParseError as e:
            logger.error("Failed to parse PR event", extra={"error": str(e)})
            result.status = "error"
            result.error = str(e)
            return result

        logger.info(
            "PR event parsed for review",
            extra={"pr_number": pr.number, "repository": pr.repository, "action": action},
        )
        result.should_review = True
        result.pull_request = pr
        return result

    def _handle_ping(self, payload: dict[str, Any]) -> DispatchResult:
        zen = payload.get("zen")
        if zen is None:
            logger.error("Ping event without zen")
            return DispatchResult(event_type="ping", status="error", error="Missing 'zen'")

        logger.info("Ping event received", extra={"zen": zen, "hook_id": payload.get("hook_id")})
        return DispatchResult(event_type="ping", detail=zen)

    def _handle_installation(self, payload: dict[str, Any]) -> DispatchResult:
        action = payload.get("action", "")
        installation_id = payload.get("installation", {}).get("id")

        logger.info(
            "Installation event received",
            extra={"action": action, "installation_id": installation_id},
        )
        return DispatchResult(event_type="installation", action=action)
