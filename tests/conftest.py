from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _quiet_verbose_debug(monkeypatch):
    import config

    monkeypatch.setattr(config, "VERBOSE_DEBUG", False)
