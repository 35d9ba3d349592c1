"""
Tests for composing stage frames with Pillow.
"""
import pytest
from PIL import Image

from ObjectModel import Container
from StageRender import render_stage_image, marker_size, stack_alpha, format_block_row
from StageSet import Stage
from conftest import ManualFrameScheduler, make_object

GREEN = (0, 255, 0, 255)


def split_image():
    """100x100 stage, red left half, blue right half."""
    image = Image.new('RGB', (100, 100), (255, 0, 0))
    image.paste((0, 0, 255), (50, 0, 100, 100))
    return image


def make_stage(objects=()):
    return Stage(split_image(), list(objects), ManualFrameScheduler())


class TestMarkerMath:
    """Tests for marker sizing."""

    def test_marker_size_grows(self):
        assert marker_size(1.0) == pytest.approx(5 * 2.5 ** 0.5)
        assert marker_size(4.0) > marker_size(1.0)

    def test_stack_alpha(self):
        """Stack counts fade in above 0.25 and are opaque above 1.5."""
        assert stack_alpha(0.25) == 0
        assert stack_alpha(0.2) == 0
        assert 0 < stack_alpha(1.0) < 255
        assert stack_alpha(1.5) == 255
        assert stack_alpha(2.0) == 255


class TestRenderStageImage:
    """Tests for render_stage_image."""

    def test_frame_size(self):
        frame = render_stage_image(make_stage(), 120, 80)
        assert frame.size == (120, 80)
        assert frame.mode == 'RGBA'

    def test_background_follows_view(self):
        """The background is drawn through the viewport transform."""
        stage = make_stage()
        frame = render_stage_image(stage, 100, 100)
        assert frame.getpixel((10, 50)) == (255, 0, 0, 255)
        assert frame.getpixel((90, 50)) == (0, 0, 255, 255)

        stage.viewport.apply(2.0, 50, 50)
        frame = render_stage_image(stage, 100, 100)
        assert frame.getpixel((10, 50)) == (255, 0, 0, 255)
        assert frame.getpixel((90, 50)) == (0, 0, 255, 255)

    def test_outside_stage_is_background(self):
        """Display areas outside the stage image stay black."""
        stage = make_stage()
        stage.viewport.apply(1.0, 0, 0)
        frame = render_stage_image(stage, 100, 100)
        assert frame.getpixel((10, 10)) == (0, 0, 0, 255)

    def test_marker_drawn_with_type_color(self):
        """Objects get a marker filled with their type color."""
        stage = make_stage([make_object(30, 70, obj_type=0x0042)])
        frame = render_stage_image(stage, 100, 100, fill_colors={0x0042: GREEN})
        assert frame.getpixel((30, 70)) == GREEN

    def test_hidden_objects_not_drawn(self):
        """The table filter also hides markers."""
        stage = make_stage([make_object(30, 70, obj_type=0x0042, container=Container.INITIAL_TABLE)])
        stage.selection.set_filter(Container.REGION_TABLE)
        frame = render_stage_image(stage, 100, 100, fill_colors={0x0042: GREEN})
        assert frame.getpixel((30, 70)) == (255, 0, 0, 255)

    def test_selection_box(self):
        """The selected object gets a red dashed square around its marker."""
        obj = make_object(75, 50, obj_type=0x0042)
        stage = make_stage([obj])
        before = render_stage_image(stage, 100, 100, fill_colors={0x0042: GREEN})
        stage.selection.select(obj)
        after = render_stage_image(stage, 100, 100, fill_colors={0x0042: GREEN})

        # Rows just above the marker, where only the top edge of the box lands
        def red_pixels(frame):
            return sum(1 for x in range(66, 85) for y in range(41, 46)
                       if frame.getpixel((x, y)) == (255, 0, 0, 255))

        assert red_pixels(before) == 0
        assert red_pixels(after) > 0


class TestBlockRows:
    """Tests for address dialog rows."""

    def test_empty_block(self):
        assert format_block_row(0xE140, [], 0x40) == "0xE140 - 0xE17F"

    def test_used_block(self):
        objects = [make_object(0, 0, obj_type=0x12), make_object(0, 0, obj_type=0x7D)]
        assert format_block_row(0xE140, objects, 0x40) == "0xE140 - 0xE17F   [0x0012] [0x007D]"
