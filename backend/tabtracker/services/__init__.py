from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..config import TrackerSettings
from .import_service import IntakePipeline
from .lifecycle_service import LifecycleEngine
from .location_registry import LocationRegistry
from .office_scan_service import OfficeScanner


EXTENSION_KEY = "tabtracker"


@dataclass(frozen=True)
class TrackerServices:
    settings: TrackerSettings
    registry: LocationRegistry
    engine: LifecycleEngine
    intake: IntakePipeline
    scanner: OfficeScanner

    @classmethod
    def build(cls, settings: TrackerSettings) -> "TrackerServices":
        registry = LocationRegistry(settings)
        return cls(
            settings=settings,
            registry=registry,
            engine=LifecycleEngine(registry),
            intake=IntakePipeline(registry),
            scanner=OfficeScanner(settings),
        )


def tracker() -> TrackerServices:
    """Services bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]
