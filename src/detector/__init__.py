"""Transparent interception of object/function graphs.

This package provides:
- `instrument()`, which wraps a root value and lazily wraps everything reached
  through it, reporting reads, writes, deletes, calls, constructions and the
  settlement of returned awaitables as `Event` records.
- Path rendering (`a.b[2].c`) and include/exclude filtering of those paths.
- Small ready-made observers for collecting or logging events.
"""

from .config import InstrumentOptions, load_options
from .emitter import EventEmitter
from .filters import PathFilter, should_report
from .logging_config import JSONFormatter, setup_logging
from .models import (
    APPLY,
    APPLY_REJECTED,
    APPLY_RESOLVED,
    CONSTRUCT,
    DELETE_PROPERTY,
    GET,
    SET,
    Event,
    EventType,
)
from .observers import EventObserver, InMemoryEventCollector, LoggingObserver
from .paths import CONSTRUCTED, SYNC_RESULT, Marker, Path, render
from .registry import WrapRegistry
from .session import InstrumentSession, instrument
from .tracker import AsyncResultTracker, is_deferred
from .wrapper import Wrapper, is_wrapper, unwrap

__all__ = [
    "APPLY",
    "APPLY_REJECTED",
    "APPLY_RESOLVED",
    "CONSTRUCT",
    "CONSTRUCTED",
    "DELETE_PROPERTY",
    "GET",
    "SET",
    "SYNC_RESULT",
    "AsyncResultTracker",
    "Event",
    "EventEmitter",
    "EventObserver",
    "EventType",
    "InMemoryEventCollector",
    "InstrumentOptions",
    "InstrumentSession",
    "JSONFormatter",
    "LoggingObserver",
    "Marker",
    "Path",
    "PathFilter",
    "WrapRegistry",
    "Wrapper",
    "instrument",
    "is_deferred",
    "is_wrapper",
    "load_options",
    "render",
    "setup_logging",
    "should_report",
    "unwrap",
]
