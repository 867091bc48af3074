"""Verification of webhook payloads and extraction of bot commands."""

from __future__ import annotations

import hashlib
import hmac

from craterlite.hexcodec import HexError, from_hex


def verify_signature(secret: str, payload: bytes, raw_signature: str) -> bool:
    """Check an ``X-Hub-Signature`` value of the form ``sha1=<hex>``."""
    if "=" not in raw_signature:
        return False
    algorithm, _, hex_signature = raw_signature.partition("=")
    try:
        signature = from_hex(hex_signature)
    except HexError:
        return False
    if algorithm != "sha1":
        return False
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha1).digest()
    return hmac.compare_digest(expected, signature)


def _lines(body: str):
    for line in body.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def find_command(body: str, bot_username: str) -> str | None:
    """The first non-empty command addressed to the bot in a comment."""
    prefix = f"@{bot_username} "
    for line in _lines(body):
        if not line.startswith(prefix):
            continue
        command = line[line.index(" ") :].strip()
        if command:
            return command
    return None