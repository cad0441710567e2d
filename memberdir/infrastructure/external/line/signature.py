"""Webhook signature: base64(HMAC-SHA256(channel_secret, raw_body))."""

import base64
import hashlib
import hmac


def compute_signature(body: bytes, channel_secret: str) -> str:
    """Return the X-Line-Signature value for body."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(body: bytes, signature: str | None, channel_secret: str) -> bool:
    """Return True if signature matches body (constant-time compare)."""
    if not signature:
        return False
    expected = compute_signature(body, channel_secret)
    return hmac.compare_digest(signature.strip(), expected)
