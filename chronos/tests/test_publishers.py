# chronos/tests/test_publishers.py
import json

import pytest
import requests

from chronos.notifier import x_publisher
from chronos.notifier.x_publisher import (
    SimulatedXPublisher,
    SyndicationError,
    WebhookPublisher,
    publisher_from_env,
)
from chronos.storage.models import Source
from chronos.tests.fakes import make_item, run


class _Resp:
    def __init__(self, status=200):
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _Session:
    def __init__(self, status=200):
        self.status = status
        self.posts = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.posts.append((url, json.loads(data)))
        return _Resp(self.status)


def test_simulated_publisher_always_succeeds():
    assert run(SimulatedXPublisher(delay_seconds=0).publish(make_item("Sim"))) is True


def test_webhook_publisher_posts_payload():
    session = _Session()
    item = make_item("Hook", sentiment="bearish", sources=[Source(title="Wire", url="https://w.example")])

    assert run(WebhookPublisher("https://hook.example", session=session).publish(item)) is True

    url, payload = session.posts[0]
    assert url == "https://hook.example"
    assert payload["title"] == "Technology: Hook"
    assert payload["text"].startswith("[BEARISH]")
    assert "https://w.example" in payload["text"]


def test_webhook_publisher_http_error():
    publisher = WebhookPublisher("https://hook.example", session=_Session(status=500))
    with pytest.raises(SyndicationError):
        run(publisher.publish(make_item("Broken")))


def test_publisher_from_env(monkeypatch):
    monkeypatch.setattr(x_publisher, "SYNDICATION_WEBHOOK_URL", None)
    assert isinstance(publisher_from_env(), SimulatedXPublisher)
    monkeypatch.setattr(x_publisher, "SYNDICATION_WEBHOOK_URL", "https://hook.example")
    assert isinstance(publisher_from_env(), WebhookPublisher)
