"""
tests/unit/test_container.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for service wiring, shutdown and settings defaults.
"""
from __future__ import annotations

import pytest

from ei_regions.config.settings import Settings
from ei_regions.services.container import build_services
from ei_regions.services.freshness import STALE_AFTER


class TestServicesClose:
    def test_closes_both_adapters(self, services, memory_store, fake_source):
        services.close()
        assert fake_source.closed is True
        assert memory_store.closed is True

    def test_store_closed_when_source_close_fails(self, settings, memory_store, fake_source,
                                                  monkeypatch):
        def _boom():
            raise RuntimeError("session already torn down")

        monkeypatch.setattr(fake_source, "close", _boom)
        services = build_services(settings, store=memory_store, source=fake_source)
        with pytest.raises(RuntimeError):
            services.close()
        assert memory_store.closed is True


class TestSettingsDefaults:
    def test_stale_after_days_follows_freshness_constant(self, monkeypatch):
        monkeypatch.delenv("STALE_AFTER_DAYS", raising=False)
        assert Settings().stale_after_days == STALE_AFTER.days

    def test_stale_after_days_env_override(self, monkeypatch):
        monkeypatch.setenv("STALE_AFTER_DAYS", "7")
        assert Settings().stale_after_days == 7
