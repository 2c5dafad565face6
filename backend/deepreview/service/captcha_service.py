"""
Stateless arithmetic captcha for sign-up.

token = base64url(json{answer, ts}) + "." + base64url(HMAC-SHA256(secret, payload))
"""

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Optional, Tuple

from ..config import Config


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _sign(payload: str, secret: Optional[str] = None) -> str:
    key = (secret or Config.captcha.secret_key).encode("utf-8")
    return _b64url(hmac.new(key, payload.encode("utf-8"), hashlib.sha256).digest())


def generate_captcha(now: Optional[float] = None) -> Tuple[str, str]:
    """Return (question, token)."""
    a = secrets.randbelow(9) + 1
    b = secrets.randbelow(9) + 1
    op = secrets.choice(["+", "-"])
    answer = a + b if op == "+" else a - b

    ts = int((now if now is not None else time.time()) * 1000)
    payload = _b64url(json.dumps({"answer": answer, "ts": ts}).encode("utf-8"))
    return f"{a} {op} {b} = ?", f"{payload}.{_sign(payload)}"


def verify_captcha(token: str, user_answer: str, now: Optional[float] = None) -> bool:
    if not token or not user_answer:
        return False

    parts = token.split(".")
    if len(parts) != 2:
        return False
    payload, sig = parts

    if not hmac.compare_digest(sig.encode("utf-8"), _sign(payload).encode("ascii")):
        return False

    try:
        data = json.loads(_b64url_decode(payload).decode("utf-8"))
        answer, ts = int(data["answer"]), int(data["ts"])
    except (ValueError, KeyError, TypeError):
        return False

    now_ms = int((now if now is not None else time.time()) * 1000)
    if now_ms - ts > Config.captcha.ttl_seconds * 1000:
        return False

    try:
        return int(str(user_answer).strip()) == answer
    except ValueError:
        return False
