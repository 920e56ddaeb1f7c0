"""
Admin authentication.

Two independent ways in: a signed, expiring bearer token (stateless) or the
Flask session set at login. `current_admin()` tries the token first, then
the session, and grants access if either succeeds.
"""
import hashlib
import hmac
import json
import time

from flask import current_app, request, session
from itsdangerous import BadData, Signer
from itsdangerous.encoding import base64_decode, base64_encode

SESSION_KEY = "is_admin"


class AdminTokenSigner:
    """
    Issues tokens of the form `base64url(json payload).base64url(hmac)`.
    The HMAC-SHA256 is computed over the encoded payload with the server
    secret; `exp` (epoch seconds) is added to the payload on issue.
    """

    def __init__(self, secret, clock=time.time):
        self.signer = Signer(
            secret,
            sep=".",
            key_derivation="none",
            digest_method=hashlib.sha256,
        )
        self.clock = clock

    def issue(self, payload, ttl):
        body = dict(payload)
        body["exp"] = self.clock() + ttl
        encoded = base64_encode(json.dumps(body, separators=(",", ":")).encode("utf-8"))
        return self.signer.sign(encoded).decode("ascii")

    def verify(self, token):
        if not token or not isinstance(token, str) or "." not in token:
            return None
        encoded, sig = token.split(".", 1)
        if not encoded or not sig:
            return None
        expected = self.signer.get_signature(encoded.encode("utf-8"))
        # encoded signatures, base64 decoding ignores trailing pad bits
        if not hmac.compare_digest(expected, sig.encode("utf-8")):
            return None
        try:
            body = json.loads(base64_decode(encoded))
        except (BadData, ValueError):
            return None
        if not isinstance(body, dict):
            return None
        exp = body.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        if self.clock() > exp:
            return None
        return body


class AdminPrincipal:
    def __init__(self, via, claims=None):
        self.via = via
        self.claims = claims or {}


def get_signer():
    return AdminTokenSigner(current_app.config["ADMIN_TOKEN_SECRET"])


def issue_admin_token():
    return get_signer().issue({"role": "admin"}, current_app.config["ADMIN_TOKEN_TTL"])


def check_password(password):
    expected = current_app.config["ADMIN_PASSWORD"]
    if not isinstance(password, str) or not expected:
        return False
    return hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))


def _bearer_token():
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip()
    return None


def _from_token(token):
    claims = get_signer().verify(token)
    if claims is None:
        return None
    return AdminPrincipal("token", claims)


def _from_session():
    if session.get(SESSION_KEY):
        return AdminPrincipal("session")
    return None


def current_admin(token=None):
    """AdminPrincipal if a valid bearer token or admin session is present, else None."""
    token = token or _bearer_token()
    if token:
        principal = _from_token(token)
        if principal:
            return principal
    return _from_session()


def start_admin_session():
    session.clear()
    session[SESSION_KEY] = True


def end_admin_session():
    session.pop(SESSION_KEY, None)
