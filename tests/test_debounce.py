"""Functional tests for debounced settings persistence."""

import asyncio
import json

import pytest

from model_presets._debounce import DebouncedSaver
from model_presets.config import MODULE_KEY, Settings, SettingsStore


def _make_saver(tmp_path, delay=0.05):
    store = SettingsStore(tmp_path / "settings.json")
    settings = Settings()
    return DebouncedSaver(store, settings, delay=delay), store


def test_schedule_without_loop_writes_immediately(tmp_path):
    saver, store = _make_saver(tmp_path)
    saver.settings.enabled = False
    saver.schedule()
    assert saver.writes == 1
    assert store.load().enabled is False


@pytest.mark.asyncio
async def test_rapid_schedules_coalesce_into_one_write(tmp_path):
    saver, store = _make_saver(tmp_path)
    for i in range(5):
        saver.settings.last_mappings[f"model-{i}"] = "Default"
        saver.schedule()
    assert saver.pending
    assert saver.writes == 0

    await asyncio.sleep(0.2)
    assert not saver.pending
    assert saver.writes == 1
    assert len(store.load().last_mappings) == 5


@pytest.mark.asyncio
async def test_schedule_resets_timer(tmp_path):
    saver, _ = _make_saver(tmp_path, delay=0.3)
    saver.schedule()
    await asyncio.sleep(0.15)
    saver.schedule()
    await asyncio.sleep(0.15)
    assert saver.writes == 0
    await asyncio.sleep(0.4)
    assert saver.writes == 1


@pytest.mark.asyncio
async def test_flush_writes_now_and_cancels_timer(tmp_path):
    saver, _ = _make_saver(tmp_path, delay=10)
    saver.schedule()
    saver.flush()
    assert saver.writes == 1
    assert not saver.pending
    blob = json.loads((tmp_path / "settings.json").read_text())
    assert MODULE_KEY in blob


@pytest.mark.asyncio
async def test_cancel_drops_pending_write(tmp_path):
    saver, _ = _make_saver(tmp_path)
    saver.schedule()
    saver.cancel()
    await asyncio.sleep(0.1)
    assert saver.writes == 0
    assert not (tmp_path / "settings.json").exists()
