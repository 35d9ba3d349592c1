"""
Stage viewport - pan/zoom transform between world (image) and display pixels
"""

import logging
import threading

from EditorConfig import MIN_SCALE, MAX_SCALE, DEFRACTION_MARGIN

def limit(value, low, high):
    """Clamp value into [low, high]"""
    return low if value < low else (high if value > high else value)

def defractionize(value):
    """Snap scales very close to 1.0 to exactly 1.0"""
    if 1.0 - DEFRACTION_MARGIN < value < 1.0 + DEFRACTION_MARGIN:
        return 1.0
    return value

class ViewportTransform:
    """Affine transform display = center + scale * (world - pan)

    The pan position is the world point shown at the center of the display
    surface. The lock guards scale/pan against the zoom animation timer.
    """

    def __init__(self, image_width, image_height, display_width=1, display_height=1,
                 min_scale=MIN_SCALE, max_scale=MAX_SCALE):
        self.image_width = image_width
        self.image_height = image_height
        self.display_width = display_width
        self.display_height = display_height
        self.min_scale = min_scale
        self.max_scale = max_scale

        self.pan_x = image_width / 2
        self.pan_y = image_height / 2
        self.scale = 1.0

        self.lock = threading.RLock()
        self.dirty = True
        self._listeners = []

    #########################################
    # Redraw Notification
    #########################################

    def add_listener(self, callback):
        """Register a callback run whenever the view changes"""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def invalidate(self):
        """Mark the rendered frame as stale and ask listeners to redraw"""
        self.dirty = True
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logging.error(f"Redraw listener failed: {e}")

    #########################################
    # Coordinate Conversion
    #########################################

    @property
    def center(self):
        return self.display_width / 2.0, self.display_height / 2.0

    def to_display(self, x, y, scale=None):
        """World point -> display point"""
        if scale is None:
            scale = self.scale
        cx, cy = self.center
        return cx + scale * (x - self.pan_x), cy + scale * (y - self.pan_y)

    def to_world(self, x, y, scale=None):
        """Display point -> world point"""
        if scale is None:
            scale = self.scale
        cx, cy = self.center
        return self.pan_x + (x - cx) / scale, self.pan_y + (y - cy) / scale

    def anchor_pan(self, display_x, display_y, new_scale):
        """Pan keeping the world point under (display_x, display_y) in place at new_scale"""
        world_x, world_y = self.to_world(display_x, display_y)
        cx, cy = self.center
        return world_x - (display_x - cx) / new_scale, world_y - (display_y - cy) / new_scale

    #########################################
    # State Changes
    #########################################

    def get_scale(self):
        return self.scale

    def set_scale(self, scale):
        """Set the zoom factor, clamped to the allowed range"""
        with self.lock:
            self.scale = limit(float(scale), self.min_scale, self.max_scale)
        self.invalidate()
        return self.scale

    def pan(self, dx, dy):
        """Move the view by a display-space delta"""
        with self.lock:
            self.pan_x += dx / self.scale
            self.pan_y += dy / self.scale
            self.limit_coords()
        self.invalidate()

    def apply(self, scale, pan_x, pan_y, notify=True):
        """Set scale and pan in one step"""
        with self.lock:
            self.scale = limit(scale, self.min_scale, self.max_scale)
            self.pan_x = pan_x
            self.pan_y = pan_y
            self.limit_coords()
            self.dirty = True
        if notify:
            self.invalidate()

    def limit_coords(self):
        """Keep the pan position inside the stage image"""
        self.pan_x = limit(self.pan_x, 0, self.image_width)
        self.pan_y = limit(self.pan_y, 0, self.image_height)

    def set_display_size(self, width, height):
        self.display_width = max(1, width)
        self.display_height = max(1, height)
        self.invalidate()

    def set_image_size(self, width, height):
        with self.lock:
            self.image_width = width
            self.image_height = height
            self.limit_coords()
        self.invalidate()

    def snapshot(self):
        """(scale, pan_x, pan_y) read under the lock"""
        with self.lock:
            return self.scale, self.pan_x, self.pan_y
