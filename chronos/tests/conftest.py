# chronos/tests/conftest.py
import pytest

from chronos.feeds.base import ProviderFetchError
from chronos.storage.models import AppConfig, Coordinates
from chronos.tracker.update_cycle import UpdateCycleController
from chronos.tests.fakes import FakePublisher, ScriptedFeed


@pytest.fixture()
def publisher():
    return FakePublisher()


@pytest.fixture()
def make_controller(publisher):
    def _make(script=(), feed=None, location=None, **config):
        cfg = AppConfig(**{"update_interval_minutes": 1, **config})

        async def locate():
            return location

        return UpdateCycleController(
            feed=feed or ScriptedFeed(script),
            publisher=publisher,
            config=cfg,
            location_provider=locate,
            link_delay_seconds=0,
        )
    return _make


@pytest.fixture()
def controller(make_controller):
    return make_controller(
        ["AI Breakthrough", "Market Update", ProviderFetchError("boom")] + [f"Headline {i}" for i in range(10)],
        location=Coordinates(lat=-23.5, lng=-46.6),
    )


@pytest.fixture()
def app(monkeypatch, controller):
    # Patches para impedir rede/scheduler no startup
    from chronos.api import main as api_main

    async def no_warm_up():
        return None
    monkeypatch.setattr(api_main, "warm_up", no_warm_up, raising=True)

    class DummyScheduler:
        def add_job(self, *a, **k): pass
        def start(self): pass
        def shutdown(self, wait=False): pass
    monkeypatch.setattr(api_main, "scheduler", DummyScheduler(), raising=True)
    monkeypatch.setattr(api_main, "controller", controller, raising=True)

    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
