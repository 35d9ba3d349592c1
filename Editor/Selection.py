"""
Pointer handling on the stage view - click to select, drag to move, pan the view
"""

import logging

import numpy as np

from EditorConfig import SELECTION_THRESHOLD, BUTTON_PRIMARY, BUTTON_MIDDLE, BUTTON_SECONDARY
from ObjectModel import Container, is_visible

class SelectionController:
    """Selection and drag state for one stage"""

    def __init__(self, viewport, registry, threshold=SELECTION_THRESHOLD):
        self.viewport = viewport
        self.registry = registry
        self.threshold = threshold
        self.show_filter = Container.ALL_TABLES
        self.selected = None

        self.drag_armed = False
        self.dragging = False
        self.pan_anchor = None

        self.selection_listeners = []
        self.move_listeners = []

    def _notify(self, listeners):
        for callback in list(listeners):
            try:
                callback(self.selected)
            except Exception as e:
                logging.error(f"Selection listener failed: {e}")

    #########################################
    # Hit Testing
    #########################################

    def pick(self, world_x, world_y):
        """Closest visible object within the threshold, first one wins ties"""
        candidates = self.registry.visible(self.show_filter)
        if not candidates:
            return None
        positions = np.array([obj.absolute_position for obj in candidates], dtype=float)
        distances = np.hypot(positions[:, 0] - world_x, positions[:, 1] - world_y)
        best = int(np.argmin(distances))
        if distances[best] < self.threshold:
            return candidates[best]
        return None

    def distance_to_selected(self, world_x, world_y):
        if self.selected is None:
            return None
        return float(np.hypot(self.selected.absolute_x - world_x, self.selected.absolute_y - world_y))

    #########################################
    # Selection State
    #########################################

    def select(self, obj):
        self.selected = obj
        self._notify(self.selection_listeners)
        self.viewport.invalidate()

    def clear(self):
        self.select(None)

    def set_filter(self, show_filter):
        """Change the table filter, dropping a selection that is no longer shown"""
        self.show_filter = show_filter
        if self.selected is not None and not is_visible(self.selected.container, show_filter):
            self.selected = None
            self._notify(self.selection_listeners)
        self.viewport.invalidate()

    def remove_selected(self):
        """Delete the selected object from the stage, returns it (or None)"""
        obj = self.selected
        if obj is None:
            return None
        self.registry.remove(obj)
        self.clear()
        return obj

    #########################################
    # Pointer Events (display coordinates)
    #########################################

    def press(self, x, y, button=BUTTON_PRIMARY):
        if button in (BUTTON_MIDDLE, BUTTON_SECONDARY):
            self.pan_anchor = (x, y)
            self.drag_armed = False
            return
        self.pan_anchor = None
        if button != BUTTON_PRIMARY or self.selected is None:
            self.drag_armed = False
            return
        world_x, world_y = self.viewport.to_world(x, y)
        self.drag_armed = self.distance_to_selected(world_x, world_y) < self.threshold

    def drag(self, x, y):
        if self.pan_anchor is not None:
            prev_x, prev_y = self.pan_anchor
            self.viewport.pan(prev_x - x, prev_y - y)
            self.pan_anchor = (x, y)
            return
        if not self.drag_armed or self.selected is None:
            return

        self.dragging = True
        world_x, world_y = self.viewport.to_world(x, y)
        new_x = max(int(world_x), 0)
        new_y = max(int(world_y), 0)
        self.selected.set_absolute_position(new_x, new_y)
        self._notify(self.move_listeners)
        self.viewport.invalidate()

    def release(self, x, y, button=BUTTON_PRIMARY):
        if button == BUTTON_PRIMARY and not self.dragging:
            world_x, world_y = self.viewport.to_world(x, y)
            self.select(self.pick(world_x, world_y))
        elif self.dragging and self.selected is not None:
            logging.info(f"Moved object 0x{self.selected.type:04X} to "
                         f"({self.selected.absolute_x}, {self.selected.absolute_y})")
        self.dragging = False
        self.drag_armed = False
        self.pan_anchor = None
