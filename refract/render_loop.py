"""
Background render loop driving one or more fractal views.

Each frame the loop reallocates any view that was resized, then renders
every view (one refinement pass plus recoloring). The loop can be paused
and resumed; pausing only stops the thread from starting new frames, so
the generators keep their cached state and continue refining on resume.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class RenderLoop:
    """
    Renders FractalViews on a background thread.

    Usage:
        loop = RenderLoop([mandel_view, julia_view], on_frame=callback)
        loop.start()
        ...
        loop.pause()
        loop.resume()
        loop.stop()

    Attributes:
        views: Views rendered in order every frame
        frames: Number of frames completed
    """

    def __init__(self, views, on_frame=None):
        self.views = list(views)
        self.on_frame = on_frame
        self.frames = 0
        self.error = None

        self._running = threading.Event()   # Set while not paused
        self._running.set()
        self._stopping = threading.Event()
        self._thread = None
        self.lock = threading.Lock()

    def render_once(self):
        """Render a single frame of every view on the calling thread."""
        for view in self.views:
            if view.has_resized():
                view.initialize()
        for view in self.views:
            view.render()
        self.frames += 1
        if self.on_frame is not None:
            self.on_frame(self)

    def start(self):
        """Start the render thread, or resume it if paused."""
        with self.lock:
            if self._thread is not None and self._thread.is_alive():
                self.resume()
                return
            self._stopping.clear()
            self._running.set()
            self._thread = threading.Thread(target=self._run, name="refract-render")
            self._thread.daemon = True
            self._thread.start()
        logger.info("Render loop started")

    def _run(self):
        try:
            while not self._stopping.is_set():
                self.render_once()
                # Wait here while paused; stop() also sets the event to wake us
                self._running.wait()
        except Exception as e:
            self.error = e
            logger.exception("Render loop failed")
        logger.info("Render loop stopped after %d frames", self.frames)

    def pause(self):
        """Suspend rendering after the current frame."""
        if self._running.is_set():
            self._running.clear()
            logger.info("Render loop paused")

    def resume(self):
        if not self._running.is_set():
            self._running.set()
            logger.info("Render loop resumed")

    def toggle_pause(self):
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    @property
    def paused(self):
        return not self._running.is_set()

    @property
    def alive(self):
        return self._thread is not None and self._thread.is_alive()

    def stop(self, timeout=None):
        """Stop the thread after the current frame and wait for it."""
        self._stopping.set()
        self._running.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        self._thread = None
