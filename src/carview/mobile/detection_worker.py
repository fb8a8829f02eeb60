"""
Threaded detection worker for CarView.

Runs the RecognitionPipeline in a background thread to keep the UI
thread free. Exactly one frame is in flight at a time: frames submitted
while the worker is busy are dropped, not queued. Results are published
as immutable RecognitionSet snapshots on a ResultChannel.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from ..core.config import Config
from ..core.pipeline import RecognitionPipeline
from ..core.recognition import FrameMeta
from ..detection.recognition_set import RecognitionSet
from ..detection.rotation import DisplayRotation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisFrame:
    """
    A frame handed from the camera to the worker.

    Attributes:
        image: BGR numpy array
        meta: Buffer geometry
        display_rotation: Display rotation at capture time
        release: Called once the worker is done with the buffer
    """

    image: np.ndarray
    meta: FrameMeta
    display_rotation: DisplayRotation | int | None = None
    release: Callable[[], None] | None = None


class ResultChannel:
    """
    One-slot hand-off of result snapshots from worker to consumer.

    A newly published snapshot replaces one the consumer has not read
    yet, so the consumer always sees the most recent frame.
    """

    def __init__(self):
        self._queue: queue.Queue[RecognitionSet] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._latest: RecognitionSet | None = None
        self.replaced = 0

    def publish(self, result: RecognitionSet) -> None:
        """Publish a snapshot, replacing any unread one."""
        with self._lock:
            try:
                self._queue.get_nowait()
                self.replaced += 1
            except queue.Empty:
                pass
            self._queue.put_nowait(result)
            self._latest = result

    def get(self, timeout: float | None = 0.1) -> RecognitionSet | None:
        """
        Take the next unread snapshot.

        Args:
            timeout: Seconds to wait, None to block

        Returns:
            RecognitionSet, or None if nothing arrived in time
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def latest(self) -> RecognitionSet | None:
        """Most recently published snapshot, read or not."""
        return self._latest


class DetectionWorker:
    """
    Background worker for running recognition on camera frames.

    Usage:
        worker = DetectionWorker(pipeline, preview_size=(1080, 1920))
        worker.start()
        worker.submit_frame(frame, meta, DisplayRotation.ROTATION_0)
        result = worker.results.get()
        worker.stop()
    """

    def __init__(
        self,
        pipeline: RecognitionPipeline,
        preview_size: tuple[int, int] = (0, 0),
        results: ResultChannel | None = None,
        join_timeout: float = 2.0,
    ):
        """
        Initialize the detection worker.

        Args:
            pipeline: RecognitionPipeline used for every frame
            preview_size: (width, height) of the preview surface
            results: Channel results are published to
            join_timeout: Seconds to wait for the thread on stop()
        """
        self.pipeline = pipeline
        self.results = results or ResultChannel()
        self.join_timeout = join_timeout

        self._preview_size = preview_size
        self._lock = threading.Lock()
        self._frame_ready = threading.Event()
        self._pending: AnalysisFrame | None = None
        self._in_flight = False
        self._worker_thread: threading.Thread | None = None
        self._running = False

        # Statistics
        self.frames_processed = 0
        self.frames_dropped = 0
        self.frames_failed = 0

    @classmethod
    def from_config(
        cls, pipeline: RecognitionPipeline, config: Config | dict[str, Any]
    ) -> "DetectionWorker":
        """Create a worker using the 'worker' config section."""
        worker_config = config.get("worker", {})
        return cls(pipeline, join_timeout=worker_config.get("join_timeout", 2.0))

    def start(self) -> None:
        """
        Start the detection worker thread.

        Refuses to start while a thread left over from a timed-out stop()
        is still processing its frame.
        """
        if self._running:
            logger.warning("DetectionWorker already running")
            return

        previous = self._worker_thread
        if previous is not None:
            previous.join(timeout=self.join_timeout)
            if previous.is_alive():
                logger.warning("DetectionWorker not started: previous thread still running")
                return
            self._worker_thread = None

        self._running = True
        self._worker_thread = threading.Thread(
            target=self._worker_loop,
            name="DetectionWorker",
            daemon=True,
        )
        self._worker_thread.start()
        logger.info("DetectionWorker started")

    def stop(self) -> None:
        """Stop the detection worker thread."""
        if not self._running:
            return

        self._running = False
        self._frame_ready.set()

        finished = True
        if self._worker_thread is not None:
            self._worker_thread.join(timeout=self.join_timeout)
            finished = not self._worker_thread.is_alive()
            if finished:
                self._worker_thread = None

        # A frame accepted but never picked up still owns its buffer
        if finished:
            with self._lock:
                pending, self._pending = self._pending, None
                self._in_flight = False
            if pending is not None:
                self._release(pending)
        else:
            logger.warning("DetectionWorker thread did not finish in time")

        logger.info(
            f"DetectionWorker stopped: "
            f"processed={self.frames_processed}, "
            f"dropped={self.frames_dropped}, "
            f"failed={self.frames_failed}"
        )

    def submit_frame(
        self,
        image: np.ndarray,
        meta: FrameMeta,
        display_rotation: DisplayRotation | int | None = None,
        release: Callable[[], None] | None = None,
    ) -> bool:
        """
        Submit a frame for recognition.

        The frame is dropped if another frame is still being processed.
        A dropped frame's release callback is called immediately.

        Args:
            image: BGR numpy array to analyze
            meta: Buffer geometry
            display_rotation: Display rotation at capture time
            release: Called when the worker no longer needs the buffer

        Returns:
            True if the frame was accepted, False if dropped.
        """
        frame = AnalysisFrame(image, meta, display_rotation, release)

        with self._lock:
            accepted = self._running and not self._in_flight
            if accepted:
                self._pending = frame
                self._in_flight = True
            elif self._running:
                self.frames_dropped += 1

        if not accepted:
            self._release(frame)
            return False

        self._frame_ready.set()
        return True

    def set_preview_size(self, width: int, height: int) -> None:
        """Update the preview surface size used for mapping."""
        self._preview_size = (width, height)
        logger.info(f"DetectionWorker preview size set to: {width}x{height}")

    def _worker_loop(self) -> None:
        """Main worker loop - processes one frame at a time."""
        logger.debug("DetectionWorker loop started")

        while self._running:
            if not self._frame_ready.wait(timeout=0.1):
                continue
            self._frame_ready.clear()

            with self._lock:
                frame = self._pending
            if frame is None:
                continue

            try:
                self._process(frame)
            finally:
                # Release before the next frame can be accepted
                self._release(frame)
                with self._lock:
                    self._pending = None
                    self._in_flight = False

        logger.debug("DetectionWorker loop exited")

    def _process(self, frame: AnalysisFrame) -> None:
        try:
            result = self.pipeline.process(
                frame.image, frame.meta, frame.display_rotation, self._preview_size
            )
        except Exception as e:
            self.frames_failed += 1
            logger.error(f"Recognition error: {e}")
            return

        if result is None:
            self.frames_failed += 1
            return

        self.frames_processed += 1
        self.results.publish(result)

    @staticmethod
    def _release(frame: AnalysisFrame) -> None:
        if frame.release is None:
            return
        try:
            frame.release()
        except Exception as e:
            logger.error(f"Error releasing frame buffer: {e}")

    @property
    def is_running(self) -> bool:
        """Check if worker is running."""
        return self._running

    @property
    def is_busy(self) -> bool:
        """Check if a frame is currently in flight."""
        return self._in_flight
