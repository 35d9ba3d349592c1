"""
Stage set - the per-stage editing state behind the stage tabs
"""

import logging
import math

import numpy as np
from PIL import Image

from EditorConfig import SMOOTH_ZOOM_DEFAULT, STAGES_PER_ROUND
from ObjectModel import PlacedObject, ObjectValidationError, StageCountError
from Viewport import ViewportTransform
from ZoomAnimator import ZoomAnimator
from ObjectRegistry import ObjectRegistry
from Selection import SelectionController
from AddressAllocator import AddressAllocator
from ObjectEditor import EditSession, AddSession

def as_stage_image(image):
    """Accept a PIL image or a numpy pixel array as stage background"""
    if isinstance(image, Image.Image):
        return image
    if isinstance(image, np.ndarray):
        return Image.fromarray(image.astype('uint8'))
    raise ObjectValidationError(f"Unsupported stage image: {type(image).__name__}")

def as_object_list(objects):
    objects = list(objects) if objects is not None else []
    for obj in objects:
        if not isinstance(obj, PlacedObject):
            raise ObjectValidationError(f"Not a placed object: {obj!r}")
    return objects

def stage_name(index, count):
    """Stage tab label, "1-1" .. "8-3" with the final stage shown as just its round"""
    if index == count - 1:
        return f"{index // STAGES_PER_ROUND + 1}"
    return f"{index // STAGES_PER_ROUND + 1}-{index % STAGES_PER_ROUND + 1}"

class Stage:
    """Background image plus the view, objects and selection of one stage"""

    def __init__(self, image, objects, scheduler=None, smooth=SMOOTH_ZOOM_DEFAULT):
        self.image = as_stage_image(image)
        self.viewport = ViewportTransform(self.image.width, self.image.height)
        self.registry = ObjectRegistry(as_object_list(objects))
        self.animator = ZoomAnimator(self.viewport, scheduler, smooth)
        self.selection = SelectionController(self.viewport, self.registry)
        self.allocator = AddressAllocator(self.registry)

    def replace(self, image, objects):
        """Swap in reloaded data, keeping the current zoom"""
        self.animator.cancel()
        self.selection.clear()
        self.image = image
        self.registry.replace_all(objects)
        self.viewport.set_image_size(image.width, image.height)

class StageSet:
    """All stages of a loaded game, addressed by stage index"""

    def __init__(self, describe=None, scheduler_factory=None, smooth=SMOOTH_ZOOM_DEFAULT, length_rule=None):
        """
        Args:
            describe: Optional callable type -> description text
            scheduler_factory: Callable returning a frame scheduler per stage
                               (None uses a background thread)
            smooth: Animate wheel zooms
            length_rule: Optional callable (type, container) -> data length for new objects
        """
        self.describer = describe
        self.scheduler_factory = scheduler_factory
        self.length_rule = length_rule
        self._smooth = smooth
        self.stages = []

    def __len__(self):
        return len(self.stages)

    def __iter__(self):
        return iter(self.stages)

    def stage(self, stage_id):
        if stage_id is None:
            raise ObjectValidationError("No stage selected.")
        if not 0 <= stage_id < len(self.stages):
            raise IndexError(f"Stage {stage_id} out of range (0-{len(self.stages) - 1})")
        return self.stages[stage_id]

    def _new_scheduler(self):
        if self.scheduler_factory is None:
            return None
        return self.scheduler_factory()

    #########################################
    # Loading
    #########################################

    def load(self, stages):
        """Replace everything with a list of (image, objects) pairs"""
        prepared = [(as_stage_image(image), as_object_list(objects)) for image, objects in stages]
        self.shutdown()
        self.stages = [Stage(image, objects, self._new_scheduler(), self._smooth)
                       for image, objects in prepared]
        logging.info(f"Loaded {len(self.stages)} stages")
        return self.stages

    def reload(self, stages):
        """Refresh images and objects of the open stages, keeping their views"""
        stages = list(stages)
        if len(stages) != len(self.stages):
            raise StageCountError(f"Number of maps ({len(stages)}) does not match "
                                  f"number of stages ({len(self.stages)})")
        prepared = [(as_stage_image(image), as_object_list(objects)) for image, objects in stages]
        for stage, (image, objects) in zip(self.stages, prepared):
            stage.replace(image, objects)
        logging.info(f"Reloaded {len(self.stages)} stages")

    def shutdown(self):
        """Stop every running zoom animation"""
        for stage in self.stages:
            stage.animator.cancel()

    #########################################
    # Queries
    #########################################

    def current_objects(self, stage_id):
        return self.stage(stage_id).registry.objects

    def selected_object(self, stage_id):
        return self.stage(stage_id).selection.selected

    def describe(self, obj_type):
        if self.describer is None:
            return ''
        return self.describer(obj_type)

    def stage_name(self, index):
        return stage_name(index, len(self.stages))

    #########################################
    # Zoom
    #########################################

    @property
    def smooth_zoom(self):
        return self._smooth

    @smooth_zoom.setter
    def smooth_zoom(self, value):
        self._smooth = bool(value)
        for stage in self.stages:
            stage.animator.smooth = self._smooth

    def get_scale(self, stage_id):
        return self.stage(stage_id).viewport.get_scale()

    def get_min_scale(self, stage_id):
        return self.stage(stage_id).viewport.min_scale

    def get_max_scale(self, stage_id):
        return self.stage(stage_id).viewport.max_scale

    def set_scale(self, stage_id, scale):
        stage = self.stage(stage_id)
        stage.animator.cancel()
        return stage.viewport.set_scale(scale)

    def set_scale_from_text(self, stage_id, text):
        """Handle the "set zoom" command, returns the applied (clamped) scale"""
        try:
            scale = float(text)
        except (TypeError, ValueError):
            raise ObjectValidationError("Invalid value")
        if not math.isfinite(scale):
            raise ObjectValidationError("Invalid value")
        scale = self.set_scale(stage_id, scale)
        logging.info(f"Stage {self.stage_name(stage_id)} scale set to {scale}")
        return scale

    #########################################
    # Object Commands
    #########################################

    def remove_selected(self, stage_id):
        obj = self.stage(stage_id).selection.remove_selected()
        if obj is None:
            raise ObjectValidationError("No object selected.")
        return obj

    def begin_edit(self, stage_id):
        stage = self.stage(stage_id)
        if stage.selection.selected is None:
            raise ObjectValidationError("No object selected.")
        return EditSession(stage.selection.selected, stage.allocator)

    def begin_add(self, stage_id, x, y):
        """Start adding an object at a world position"""
        stage = self.stage(stage_id)
        return AddSession(stage.registry, stage.allocator, x, y, self.length_rule)
