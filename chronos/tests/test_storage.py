# chronos/tests/test_storage.py
from datetime import datetime, timezone

import pytest

from chronos.storage.logger import AuditLog
from chronos.storage.models import AppConfig, NewsTopic
from chronos.storage.repository import NewsHistory
from chronos.tests.fakes import make_item
from chronos.utils.tz_utils import clock_str, format_countdown


def test_history_newest_first_and_capped():
    history = NewsHistory(max_items=3)
    for i in range(5):
        history.add(make_item(f"T{i}"))
    assert [n.title for n in history.all()] == ["T4", "T3", "T2"]
    assert history.latest().title == "T4"


def test_history_duplicate_and_mark_posted():
    history = NewsHistory()
    item = make_item("Same")
    assert history.is_duplicate(item) is False
    history.add(item)
    assert history.is_duplicate(make_item("Same")) is True
    assert history.mark_posted(item.id) is True
    assert history.get(item.id).is_posted_to_x is True
    assert history.mark_posted("nope") is False


def test_audit_log_cap_and_format():
    log = AuditLog()
    when = datetime(2024, 5, 1, 13, 4, 5, tzinfo=timezone.utc)
    for i in range(20):
        log.add(f"entry {i}", when=when)
    entries = log.entries()
    assert len(entries) == 15
    assert entries[0] == "[13:04:05] entry 19"
    assert entries[-1].endswith("entry 5")


def test_app_config_defaults_and_validation():
    cfg = AppConfig()
    assert cfg.topic == NewsTopic.tech
    assert cfg.update_interval_minutes == 60
    assert cfg.auto_post_to_x is True
    assert cfg.local_mode is False
    assert cfg.is_x_connected is False
    assert cfg.interval_seconds == 3600

    with pytest.raises(ValueError):
        AppConfig(update_interval_minutes=30)
    with pytest.raises(ValueError):
        AppConfig(topic="Weather")


def test_clock_and_countdown_format():
    assert clock_str(datetime(2024, 1, 1, 9, 0, 1, tzinfo=timezone.utc), "UTC") == "09:00:01"
    assert format_countdown(60) == "01:00"
    assert format_countdown(3600 * 4) == "4:00:00"
    assert format_countdown(-3) == "00:00"
