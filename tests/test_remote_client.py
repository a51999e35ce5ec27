"""
Testing the remote guess provider without the network.
- Trick: replace requests.post inside mindmatch.remote_client with a fake.
- Every failure must end in a legal guess from the fallback, never an exception.
"""

import json
import random

import requests

import mindmatch.remote_client as remote_client
from mindmatch.engine import is_valid_code
from mindmatch.remote_client import RemoteGuessProvider, build_prompt, parse_reply
from mindmatch.strategy import HeuristicGuessProvider
from mindmatch.types import Feedback, TurnRecord


class FakeResponse:
    def __init__(self, body, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


def model_body(payload):
    """Wrap a reply the way generateContent does."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_provider(**kwargs):
    kwargs.setdefault("api_key", "test-key")
    kwargs.setdefault("fallback", HeuristicGuessProvider(random.Random(0)))
    return RemoteGuessProvider(**kwargs)


HISTORY = [TurnRecord("045", Feedback(0, 0))]


def test_build_prompt_lists_history():
    prompt = build_prompt([TurnRecord("123", Feedback(1, 2))])
    assert "Guess 1: 123 -> Result: 1 Correct Pos, 2 Wrong Pos" in prompt


def test_parse_reply_accepts_valid_guess():
    assert parse_reply(model_body({"guess": "987", "banter": "Hi"})) == ("987", "Hi")
    # no banter -> show the guess instead
    assert parse_reply(model_body({"guess": "987", "banter": ""})) == ("987", "987")


def test_remote_success(monkeypatch):
    calls = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        calls["url"] = url
        calls["headers"] = headers
        calls["timeout"] = timeout
        return FakeResponse(model_body({"guess": "789", "banter": "Gotcha."}))

    monkeypatch.setattr(remote_client.requests, "post", fake_post)

    provider = make_provider(model="test-model", timeout=1.5)
    assert provider.next_guess(HISTORY) == ("789", "Gotcha.")
    assert "test-model" in calls["url"]
    assert calls["headers"] == {"x-goog-api-key": "test-key"}
    # the key never goes into the URL
    assert "test-key" not in calls["url"]
    assert calls["timeout"] == 1.5


def test_missing_key_falls_back_without_calling(monkeypatch):
    def fake_post(*args, **kwargs):
        raise AssertionError("should not call the network without a key")

    monkeypatch.setattr(remote_client.requests, "post", fake_post)

    guess, commentary = make_provider(api_key="").next_guess(HISTORY)
    assert is_valid_code(guess)
    assert not set(guess) & set("045")


def test_timeout_falls_back(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("too slow")

    monkeypatch.setattr(remote_client.requests, "post", fake_post)

    guess, _ = make_provider().next_guess(HISTORY)
    assert is_valid_code(guess)


def test_http_error_falls_back(monkeypatch):
    monkeypatch.setattr(
        remote_client.requests, "post", lambda *a, **k: FakeResponse({}, status_code=503)
    )
    guess, _ = make_provider().next_guess(HISTORY)
    assert is_valid_code(guess)


def test_malformed_or_illegal_reply_falls_back(monkeypatch):
    bad_bodies = [
        {"unexpected": True},
        model_body("not json at all"),
        model_body({"guess": "112", "banter": "Duplicates!"}),
        model_body({"guess": "1234", "banter": "Too long"}),
        model_body(["123"]),
    ]
    for body in bad_bodies:
        monkeypatch.setattr(remote_client.requests, "post", lambda *a, _b=body, **k: FakeResponse(_b))
        guess, commentary = make_provider().next_guess(HISTORY)
        assert is_valid_code(guess)
        assert commentary != "Duplicates!"


def test_failed_call_never_logs_the_key(monkeypatch, caplog):
    secret_key = "SUPER-SECRET-KEY"

    class LeakyResponse(FakeResponse):
        def raise_for_status(self):
            # requests puts the full URL (and anything in it) into the message
            raise requests.HTTPError(f"400 Client Error: Bad Request for url: http://x/?key={secret_key}")

    monkeypatch.setattr(remote_client.requests, "post", lambda *a, **k: LeakyResponse({}, 400))

    with caplog.at_level("WARNING", logger="mindmatch.remote_client"):
        guess, _ = make_provider(api_key=secret_key).next_guess(HISTORY)

    assert is_valid_code(guess)
    assert "Remote guess failed (HTTPError)" in caplog.text
    assert secret_key not in caplog.text


def test_build_prompt_accepts_plain_pairs():
    prompt = build_prompt([("045", (0, 0))])
    assert "Guess 1: 045 -> Result: 0 Correct Pos, 0 Wrong Pos" in prompt
