"""
Smooth zoom animation for a stage viewport

A zoom request computes the target scale and pan, then eases the viewport
there over a fixed number of timer frames. Starting a new zoom while one is
running throws the old one away and continues from wherever the view is.
"""

import logging
import threading
import time
from enum import Enum

import numpy as np

from EditorConfig import (ZOOM_TICK_SPEED, ZOOM_ANIMATION_FRAMES, ZOOM_ANIMATION_PAUSE,
                          SMOOTH_ZOOM_DEFAULT)
from Viewport import limit, defractionize

class AnimationState(Enum):
    IDLE = 'idle'
    ANIMATING = 'animating'

def zoom_weights(frame_count):
    """Decelerating per-frame share of the total change, sums to 1"""
    i = np.arange(frame_count, dtype=float)
    weights = 1.0 / (i * i / 4.0 + 1.0)
    return weights / weights.sum()

#########################################
# Frame Schedulers
#########################################

class ThreadFrameScheduler:
    """Runs a callback at a fixed rate on a background daemon thread"""

    class Handle:
        def __init__(self):
            self._stop = threading.Event()
            self.thread = None

        def cancel(self):
            self._stop.set()

        @property
        def cancelled(self):
            return self._stop.is_set()

    def schedule(self, interval_ms, callback):
        handle = self.Handle()
        interval = interval_ms / 1000.0

        def run():
            next_time = time.monotonic()
            while not handle.cancelled:
                try:
                    callback()
                except Exception as e:
                    logging.error(f"Zoom animation frame failed: {e}")
                next_time += interval
                if handle._stop.wait(max(0.0, next_time - time.monotonic())):
                    break

        handle.thread = threading.Thread(target=run, name="zoom-animation", daemon=True)
        handle.thread.start()
        return handle

class TkFrameScheduler:
    """Posts frames into the Tk event loop with widget.after"""

    class Handle:
        def __init__(self, widget):
            self.widget = widget
            self.after_id = None
            self.cancelled = False

        def cancel(self):
            self.cancelled = True
            if self.after_id is not None:
                try:
                    self.widget.after_cancel(self.after_id)
                except Exception:
                    logging.debug("after_cancel on a destroyed widget", exc_info=True)
                self.after_id = None

    def __init__(self, widget):
        self.widget = widget

    def schedule(self, interval_ms, callback):
        handle = self.Handle(self.widget)

        def tick():
            handle.after_id = None
            if handle.cancelled:
                return
            try:
                callback()
            except Exception as e:
                logging.error(f"Zoom animation frame failed: {e}")
            if not handle.cancelled:
                handle.after_id = self.widget.after(interval_ms, tick)

        handle.after_id = self.widget.after(0, tick)
        return handle

#########################################
# Zoom Animator
#########################################

class ZoomAnimator:
    """Drives scale/pan of one ViewportTransform, instantly or animated"""

    def __init__(self, viewport, scheduler=None, smooth=SMOOTH_ZOOM_DEFAULT,
                 frame_count=ZOOM_ANIMATION_FRAMES, frame_pause=ZOOM_ANIMATION_PAUSE):
        self.viewport = viewport
        self.scheduler = scheduler if scheduler is not None else ThreadFrameScheduler()
        self.smooth = smooth
        self.frame_count = frame_count
        self.frame_pause = frame_pause

        self.state = AnimationState.IDLE
        self.frame = 0
        self.target = None
        self.weights = zoom_weights(frame_count)
        self.scale_steps = np.zeros(frame_count)
        self.x_steps = np.zeros(frame_count)
        self.y_steps = np.zeros(frame_count)

        self._handle = None
        self._generation = 0

    @property
    def lock(self):
        return self.viewport.lock

    @property
    def animating(self):
        return self.state == AnimationState.ANIMATING

    def zoom_target(self, tick, display_x, display_y):
        """(scale, pan_x, pan_y) a wheel tick at the pointer should end up at"""
        vp = self.viewport
        with self.lock:
            s = tick / ZOOM_TICK_SPEED
            new_scale = vp.scale - s * vp.scale
            new_scale = limit(defractionize(new_scale), vp.min_scale, vp.max_scale)
            pan_x, pan_y = vp.anchor_pan(display_x, display_y, new_scale)
            pan_x = limit(pan_x, 0, vp.image_width)
            pan_y = limit(pan_y, 0, vp.image_height)
            return new_scale, pan_x, pan_y

    def zoom(self, tick, display_x, display_y):
        """Zoom around the pointer; positive ticks zoom out"""
        with self.lock:
            target = self.zoom_target(tick, display_x, display_y)
            if self.smooth:
                self.animate_to(*target)
                return target
            self.cancel()
            self.viewport.apply(*target, notify=False)
        # Listeners run without the lock held
        self.viewport.invalidate()
        return target

    def animate_to(self, scale, pan_x, pan_y):
        """Start (or restart) an animation toward the given view"""
        with self.lock:
            self.cancel()
            self._generation += 1
            generation = self._generation
            self.target = (scale, pan_x, pan_y)
            self.frame = 0
            self.state = AnimationState.ANIMATING
            self._handle = self.scheduler.schedule(self.frame_pause, lambda: self.step(generation))

    def cancel(self):
        """Stop the running animation, discarding its progress"""
        with self.lock:
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None
            self._generation += 1
            self.frame = 0
            self.target = None
            self.state = AnimationState.IDLE

    def step(self, generation=None):
        """Advance the animation by one frame, returns False once nothing is left to do"""
        with self.lock:
            if generation is not None and generation != self._generation:
                return False
            if self.state != AnimationState.ANIMATING:
                return False

            vp = self.viewport
            dest_scale, dest_x, dest_y = self.target

            if self.frame == 0:
                self.scale_steps = (dest_scale - vp.scale) * self.weights
                self.x_steps = (dest_x - vp.pan_x) * self.weights
                self.y_steps = (dest_y - vp.pan_y) * self.weights

            prev_scale = vp.scale
            finished = self.frame == self.frame_count - 1
            if finished:
                # Land exactly on the target, no rounding drift
                new_scale = defractionize(limit(dest_scale, vp.min_scale, vp.max_scale))
                changed = True
                vp.apply(new_scale, dest_x, dest_y, notify=False)
            else:
                new_scale = limit(prev_scale + self.scale_steps[self.frame], vp.min_scale, vp.max_scale)
                new_scale = defractionize(new_scale)
                # A frame that doesn't change the scale is skipped, view untouched
                changed = new_scale != prev_scale
                if changed:
                    vp.apply(new_scale, vp.pan_x + self.x_steps[self.frame],
                             vp.pan_y + self.y_steps[self.frame], notify=False)
            self.frame += 1

            if finished:
                if self._handle is not None:
                    self._handle.cancel()
                    self._handle = None
                self.frame = 0
                self.target = None
                self.state = AnimationState.IDLE

        # Listeners run without the lock held
        if changed:
            vp.invalidate()
        return not finished
