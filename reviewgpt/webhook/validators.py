"""GitHub webhook signature checks."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails."""

    pass


def sign_payload(payload: bytes, secret: str) -> str:
    """Compute the ``X-Hub-Signature-256`` value GitHub sends for a payload."""
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_webhook_signature(payload: bytes | str, signature: str, secret: str) -> None:
    """Verify the HMAC-SHA256 signature of a webhook delivery.

    Args:
        payload: The raw request body.
        signature: The X-Hub-Signature-256 header value.
        secret: The webhook secret configured in the GitHub App.

    Raises:
        WebhookSignatureError: If the signature is missing, malformed or wrong.
    """
    if not signature:
        raise WebhookSignatureError("Missing signature header")

    if not signature.startswith(SIGNATURE_PREFIX):
        raise WebhookSignatureError(
            f"Invalid signature format: must start with '{SIGNATURE_PREFIX}'"
        )

    body = payload.encode() if isinstance(payload, str) else payload

    if not hmac.compare_digest(signature, sign_payload(body, secret)):
        raise WebhookSignatureError("Signature verification failed")
