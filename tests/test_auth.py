import json

from itsdangerous.encoding import base64_encode

from astroquiz.services.auth_service import AdminTokenSigner


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_issue_then_verify_returns_payload_with_exp():
    signer = AdminTokenSigner("s3cret", clock=FakeClock(1000.0))
    token = signer.issue({"role": "admin"}, ttl=60)

    assert token.count(".") == 1
    assert signer.verify(token) == {"role": "admin", "exp": 1060.0}


def test_token_expires_after_ttl():
    clock = FakeClock(1000.0)
    signer = AdminTokenSigner("s3cret", clock=clock)
    token = signer.issue({"role": "admin"}, ttl=60)

    clock.now = 1060.0
    assert signer.verify(token) is not None
    clock.now = 1060.5
    assert signer.verify(token) is None


def test_any_altered_character_is_rejected():
    signer = AdminTokenSigner("s3cret", clock=FakeClock(1000.0))
    token = signer.issue({"role": "admin"}, ttl=60)

    for i, ch in enumerate(token):
        replacement = "B" if ch == "A" else "A"
        tampered = token[:i] + replacement + token[i + 1:]
        assert signer.verify(tampered) is None, f"accepted change at position {i}"


def test_token_from_other_secret_is_rejected():
    token = AdminTokenSigner("first", clock=FakeClock(0)).issue({"role": "admin"}, ttl=60)
    assert AdminTokenSigner("second", clock=FakeClock(0)).verify(token) is None


def test_malformed_tokens_are_rejected():
    signer = AdminTokenSigner("s3cret")
    for token in (None, "", "abc", "abc.", ".abc", "a.b.c", 42):
        assert signer.verify(token) is None


def test_signed_payload_with_bad_exp_is_rejected():
    signer = AdminTokenSigner("s3cret", clock=FakeClock(0))
    for body in ({"role": "admin"}, {"role": "admin", "exp": "later"}, {"role": "admin", "exp": True}, ["admin"]):
        encoded = base64_encode(json.dumps(body).encode("utf-8"))
        token = signer.signer.sign(encoded).decode("ascii")
        assert signer.verify(token) is None
