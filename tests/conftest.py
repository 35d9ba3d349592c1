"""
Shared fixtures for the object editor tests.
"""
import pytest

from ObjectModel import PlacedObject, Container
from ObjectRegistry import ObjectRegistry
from Viewport import ViewportTransform


class ManualFrameScheduler:
    """Frame scheduler the test drives by hand."""

    class Handle:
        def __init__(self, callback, interval_ms):
            self.callback = callback
            self.interval_ms = interval_ms
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.handles = []

    def schedule(self, interval_ms, callback):
        handle = self.Handle(callback, interval_ms)
        self.handles.append(handle)
        return handle

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled]

    def run_frame(self):
        for handle in list(self.handles):
            if not handle.cancelled:
                handle.callback()

    def run_until_idle(self, max_frames=1000):
        frames = 0
        while self.active and frames < max_frames:
            self.run_frame()
            frames += 1
        return frames


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def viewport():
    """400x400 stage shown 1:1 on a 400x400 display (display == world)."""
    return ViewportTransform(400, 400, 400, 400)


@pytest.fixture
def registry():
    return ObjectRegistry()


def make_object(x, y, obj_type=0x0001, address=0xE140, container=Container.REGION_TABLE):
    return PlacedObject(x, y, address, obj_type, container=container)
