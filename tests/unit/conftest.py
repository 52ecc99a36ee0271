from __future__ import annotations

import pytest

from detector import InMemoryEventCollector

_ENV_VARS = ("DETECTOR_ENABLED", "DETECTOR_DEPTH_LIMIT", "DETECTOR_INCLUDE", "DETECTOR_EXCLUDE", "DETECTOR_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolated_detector_env(monkeypatch: pytest.MonkeyPatch):
    """Keep a developer's shell or `.env` from leaking DETECTOR_* settings into tests.

    `load_options()` calls `dotenv.load_dotenv()`, which never overrides variables
    already present, so unset ones are stubbed out as empty strings.
    """
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "")
    monkeypatch.setattr("detector.config.dotenv.load_dotenv", lambda *a, **kw: False)
    yield


@pytest.fixture
def collector() -> InMemoryEventCollector:
    return InMemoryEventCollector()
