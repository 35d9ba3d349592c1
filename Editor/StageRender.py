"""
Stage frame rendering with Pillow - background through the view transform plus object markers
"""

import math
from collections import Counter

from PIL import Image, ImageDraw

from EditorConfig import (POINT_MULT, STACK_SCALE_THRESHOLD, STACK_FULL_ALPHA_SCALE, STACK_COLOR,
                          SELECTION_COLOR, SELECTION_DASH, DEFAULT_FILL_COLOR, DEFAULT_OUTLINE_COLOR,
                          BACKGROUND_COLOR, TYPE_OUTLINE_COLORS, TYPE_FILL_COLORS)
from ObjectModel import is_visible
from ObjectEditor import hex_short

#########################################
# Marker Geometry
#########################################

def marker_size(scale):
    """Marker diameter in display pixels, grows slowly with the zoom"""
    return POINT_MULT * math.sqrt(scale * scale + 1.5)

def stack_alpha(scale):
    """Opacity of the stack counts, 0 when they are hidden"""
    if scale <= STACK_SCALE_THRESHOLD:
        return 0
    if scale > STACK_FULL_ALPHA_SCALE:
        return 255
    return int((scale - STACK_SCALE_THRESHOLD) * 204)

def draw_dashed_line(draw, start, end, color, dash=SELECTION_DASH, width=1):
    (x0, y0), (x1, y1) = start, end
    length = math.hypot(x1 - x0, y1 - y0)
    if length == 0:
        return
    on, off = dash
    ux, uy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + on, length)
        draw.line([(x0 + ux * pos, y0 + uy * pos), (x0 + ux * seg_end, y0 + uy * seg_end)],
                  fill=color, width=width)
        pos += on + off

def draw_dashed_rectangle(draw, box, color, dash=SELECTION_DASH, width=1):
    x0, y0, x1, y1 = box
    corners = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    for i, corner in enumerate(corners):
        draw_dashed_line(draw, corner, corners[(i + 1) % 4], color, dash, width)

#########################################
# Frame Rendering
#########################################

def render_stage_image(stage, width, height, outline_colors=TYPE_OUTLINE_COLORS, fill_colors=TYPE_FILL_COLORS):
    """Compose one display frame of a stage as an RGBA image

    Args:
        stage: Stage to draw (image, viewport, registry and selection)
        width, height: Display size in pixels
        outline_colors, fill_colors: {type: RGBA} marker colors
    """
    width = max(1, int(width))
    height = max(1, int(height))
    scale, pan_x, pan_y = stage.viewport.snapshot()
    cx, cy = width / 2.0, height / 2.0

    def to_display(x, y):
        return cx + scale * (x - pan_x), cy + scale * (y - pan_y)

    # Background through the inverse transform, empty outside the stage
    frame = Image.new('RGBA', (width, height), BACKGROUND_COLOR)
    background = stage.image.convert('RGBA').transform(
        (width, height), Image.Transform.AFFINE,
        (1 / scale, 0, pan_x - cx / scale, 0, 1 / scale, pan_y - cy / scale),
        resample=Image.NEAREST)
    frame = Image.alpha_composite(frame, background)

    overlay = Image.new('RGBA', (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    size = marker_size(scale)
    half = size / 2
    stroke = max(1, int(round(size / POINT_MULT * 0.5 + 1)))
    visible = stage.registry.visible(stage.selection.show_filter)

    for obj in visible:
        x, y = to_display(obj.absolute_x, obj.absolute_y)
        if x < -size or y < -size or x > width + size or y > height + size:
            continue
        draw.ellipse([x - half, y - half, x + half, y + half],
                     fill=fill_colors.get(obj.type, DEFAULT_FILL_COLOR),
                     outline=outline_colors.get(obj.type, DEFAULT_OUTLINE_COLOR),
                     width=stroke)

    # Number of objects sharing a position
    alpha = stack_alpha(scale)
    if alpha > 0:
        stacks = Counter(obj.absolute_position for obj in visible)
        for (wx, wy), count in stacks.items():
            if count < 2:
                continue
            x, y = to_display(wx, wy)
            draw.text((x + half + 1, y - size), str(count), fill=STACK_COLOR + (alpha,))

    selected = stage.selection.selected
    if selected is not None and is_visible(selected, stage.selection.show_filter):
        x, y = to_display(selected.absolute_x, selected.absolute_y)
        box_half = size * 1.5 / 2
        draw_dashed_rectangle(draw, (x - box_half, y - box_half, x + box_half, y + box_half),
                              SELECTION_COLOR + (255,))

    return Image.alpha_composite(frame, overlay)

def format_block_row(block_start, objects, block_size):
    """Address dialog row: address range followed by the types using the block"""
    text = f"0x{hex_short(block_start)} - 0x{hex_short(block_start + block_size - 1)}"
    if objects:
        text += "   " + " ".join(f"[0x{hex_short(obj.type)}]" for obj in objects)
    return text

