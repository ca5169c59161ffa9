# chronos/tests/test_warm_up.py
import asyncio

from chronos.storage.models import Coordinates
from chronos.tests.fakes import ScriptedFeed, run
from chronos.tracker.update_cycle import UpdateCycleController


def test_first_cycle_does_not_wait_for_location(monkeypatch, publisher):
    from chronos.api import main as api_main

    monkeypatch.setattr(api_main, "location_task", None, raising=True)
    feed = ScriptedFeed(["Startup headline"])
    here = Coordinates(lat=-23.5, lng=-46.6)

    async def scenario():
        gate = asyncio.Event()

        async def slow_locate():
            await gate.wait()
            return here

        ctrl = UpdateCycleController(feed, publisher, location_provider=slow_locate, link_delay_seconds=0)
        monkeypatch.setattr(api_main, "controller", ctrl, raising=True)

        await api_main.warm_up()
        # ciclo já rodou, localização ainda pendente
        assert len(ctrl.history) == 1
        assert ctrl.location is None
        assert not api_main.location_task.done()

        gate.set()
        await api_main.location_task
        return ctrl

    ctrl = run(scenario())
    assert feed.calls == [("Technology", None)]
    assert ctrl.location == here
    assert ctrl.snapshot().location_acquired is True
