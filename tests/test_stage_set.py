"""
Tests for the stage set surface.
"""
import numpy as np
import pytest
from PIL import Image

from ObjectModel import ObjectValidationError, StageCountError
from ObjectEditor import EditSession, AddSession
from StageSet import StageSet, stage_name, as_stage_image
from conftest import ManualFrameScheduler, make_object


def blank(width=64, height=32):
    return Image.new('RGB', (width, height))


@pytest.fixture
def stage_set():
    stages = StageSet(scheduler_factory=ManualFrameScheduler, describe=lambda t: f"Type {t:04X}")
    stages.load([
        (blank(), [make_object(1, 1), make_object(2, 2)]),
        (np.zeros((20, 40, 3), dtype=np.uint8), []),
    ])
    return stages


class TestStageNames:
    """Tests for stage tab names."""

    def test_names(self):
        """Stages are named round-act, the last one by its round only."""
        assert stage_name(0, 25) == "1-1"
        assert stage_name(2, 25) == "1-3"
        assert stage_name(3, 25) == "2-1"
        assert stage_name(23, 25) == "8-3"
        assert stage_name(24, 25) == "9"


class TestLoading:
    """Tests for load and reload."""

    def test_load(self, stage_set):
        """Images may be PIL images or numpy arrays."""
        assert len(stage_set) == 2
        assert stage_set.stage(1).image.size == (40, 20)
        assert stage_set.stage(1).viewport.image_width == 40
        assert len(stage_set.current_objects(0)) == 2

    def test_unsupported_image(self):
        with pytest.raises(ObjectValidationError):
            as_stage_image("not an image")

    def test_reload(self, stage_set):
        """Reload swaps the data but keeps the zoom."""
        stage_set.set_scale(0, 3.0)
        fresh = [make_object(9, 9)]
        stage_set.reload([(blank(128, 64), fresh), (blank(), [])])
        assert stage_set.current_objects(0) == fresh
        assert stage_set.get_scale(0) == 3.0
        assert stage_set.stage(0).viewport.image_width == 128

    def test_reload_count_mismatch(self, stage_set):
        """A different number of stages is refused and nothing changes."""
        before = stage_set.current_objects(0)
        with pytest.raises(StageCountError):
            stage_set.reload([(blank(), [])])
        assert stage_set.current_objects(0) == before

    def test_reload_validates_first(self, stage_set):
        """A bad stage anywhere leaves every stage untouched."""
        before = stage_set.current_objects(0)
        with pytest.raises(ObjectValidationError):
            stage_set.reload([(blank(), []), ("broken", [])])
        assert stage_set.current_objects(0) == before

    def test_reload_clears_selection(self, stage_set):
        stage_set.stage(0).selection.select(stage_set.current_objects(0)[0])
        stage_set.reload([(blank(), []), (blank(), [])])
        assert stage_set.selected_object(0) is None

    def test_no_stage(self, stage_set):
        with pytest.raises(ObjectValidationError):
            stage_set.stage(None)
        with pytest.raises(IndexError):
            stage_set.stage(2)


class TestScale:
    """Tests for the scale commands."""

    def test_scale_limits(self, stage_set):
        assert stage_set.get_min_scale(0) == 0.2
        assert stage_set.get_max_scale(0) == 1000.0

    def test_set_scale_from_text(self, stage_set):
        """Typed scales are parsed and clamped."""
        assert stage_set.set_scale_from_text(0, "2.5") == 2.5
        assert stage_set.set_scale_from_text(0, "5000") == 1000.0
        assert stage_set.get_scale(0) == 1000.0

    @pytest.mark.parametrize("text", ["abc", "", "nan", "inf"])
    def test_invalid_scale(self, stage_set, text):
        """Unparseable input is refused without touching the view."""
        with pytest.raises(ObjectValidationError, match="Invalid value"):
            stage_set.set_scale_from_text(0, text)
        assert stage_set.get_scale(0) == 1.0

    def test_set_scale_cancels_animation(self, stage_set):
        """A typed scale wins over a running zoom animation."""
        stage = stage_set.stage(0)
        stage.animator.zoom(-2, 10, 10)
        stage_set.set_scale(0, 4.0)
        assert not stage.animator.animating
        stage.animator.scheduler.run_until_idle()
        assert stage_set.get_scale(0) == 4.0

    def test_smooth_zoom_toggle(self, stage_set):
        """The toggle reaches every stage."""
        stage_set.smooth_zoom = False
        assert all(not stage.animator.smooth for stage in stage_set)
        stage_set.smooth_zoom = True
        assert all(stage.animator.smooth for stage in stage_set)

    def test_shutdown(self, stage_set):
        stage = stage_set.stage(0)
        stage.animator.zoom(-2, 10, 10)
        stage_set.shutdown()
        assert not stage.animator.animating


class TestObjectCommands:
    """Tests for remove/edit/add."""

    def test_remove_selected(self, stage_set):
        obj = stage_set.current_objects(0)[0]
        stage_set.stage(0).selection.select(obj)
        assert stage_set.remove_selected(0) is obj
        assert obj not in stage_set.current_objects(0)

    def test_remove_without_selection(self, stage_set):
        with pytest.raises(ObjectValidationError, match="No object selected."):
            stage_set.remove_selected(0)

    def test_begin_edit(self, stage_set):
        with pytest.raises(ObjectValidationError):
            stage_set.begin_edit(0)
        obj = stage_set.current_objects(0)[0]
        stage_set.stage(0).selection.select(obj)
        session = stage_set.begin_edit(0)
        assert isinstance(session, EditSession)
        assert session.target is obj

    def test_begin_add(self, stage_set):
        session = stage_set.begin_add(1, 4, 5)
        assert isinstance(session, AddSession)
        session.choose_block(0)
        obj = session.commit()
        assert stage_set.current_objects(1) == [obj]

    def test_describe(self, stage_set):
        assert stage_set.describe(0x2A) == "Type 002A"
        assert StageSet().describe(0x2A) == ""
