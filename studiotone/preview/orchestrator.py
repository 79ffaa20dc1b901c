"""
Filter chain orchestration for interactive enhancement.

Owns the decoded source, the current parameter snapshot and the debounced
recompute trigger. Rapid parameter changes are coalesced: only the last
snapshot after a quiet period is rendered, and a recompute whose sequence
number has since been superseded is discarded instead of committed.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Dict, Any, Optional, Callable

from ..config import get_default_config, get_config_value
from ..models import (
    ImageBuffer, HistogramStatistics, FilterParameters, ToneCurveConfig,
    FeatureToggles, EnhancementParameters
)
from ..exceptions import RenderContextUnavailable, StaleResultDiscarded
from ..analysis import HistogramAnalyzer
from ..processing import AutoEnhanceEstimator, FilterChain
from ..io import decode_image, encode_image
from ..utils.logging import StructuredLogger, RenderStats
from .models import OrchestratorState, RenderRequest

logger = logging.getLogger(__name__)


class FilterChainOrchestrator:
    """
    State machine driving one enhancement session.

    EMPTY -> READY on a successful decode, READY/RENDERED -> PROCESSING when
    the worker starts a recompute, PROCESSING -> RENDERED on success, and
    -> ERROR on decode or render failure. reset() returns to READY.

    Decoding and rendering run on a single worker thread so callers are
    never blocked; ``on_rendered`` and ``on_error`` are invoked from that
    thread.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 on_rendered: Optional[Callable[[ImageBuffer], None]] = None,
                 on_error: Optional[Callable[[Exception], None]] = None,
                 debounce_seconds: Optional[float] = None):
        """
        Initialize the orchestrator

        Args:
            config: Configuration dictionary (defaults from studiotone.config)
            on_rendered: Called with each committed output image
            on_error: Called with decode and render errors
            debounce_seconds: Quiet period before a re-render; overrides
                enhancement.debounce_ms from the config
        """
        self.config = config or get_default_config()
        if debounce_seconds is None:
            debounce_seconds = get_config_value(self.config, 'enhancement.debounce_ms', 100) / 1000.0
        self.debounce_seconds = debounce_seconds
        self.on_rendered = on_rendered
        self.on_error = on_error

        self.analyzer = HistogramAnalyzer(
            max_edge=get_config_value(self.config, 'enhancement.analysis_max_edge', 300)
        )
        self.estimator = AutoEnhanceEstimator()
        self.chain = FilterChain(self.config)

        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="StudioTone-Render")

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._state = OrchestratorState.EMPTY
        self._source: Optional[ImageBuffer] = None
        self._output: Optional[ImageBuffer] = None
        self._parameters = EnhancementParameters.identity()
        self._statistics: Optional[HistogramStatistics] = None

        # Monotonic request counters
        self._sequence = 0
        self._committed_sequence = 0
        self._load_sequence = 0

        self._timer: Optional[threading.Timer] = None
        self._in_flight = 0
        self._shutdown = False

        self.stats = RenderStats()
        self._log = StructuredLogger(__name__)

        logger.info(f"FilterChainOrchestrator initialized (debounce {self.debounce_seconds * 1000:.0f}ms)")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        with self._lock:
            return self._state

    @property
    def parameters(self) -> EnhancementParameters:
        with self._lock:
            return self._parameters

    @property
    def output(self) -> Optional[ImageBuffer]:
        """Last committed render, or None."""
        with self._lock:
            return self._output

    @property
    def source(self) -> Optional[ImageBuffer]:
        with self._lock:
            return self._source

    @property
    def statistics(self) -> Optional[HistogramStatistics]:
        """Statistics from the most recent auto-enhance."""
        with self._lock:
            return self._statistics

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def load_image(self, data: bytes, mime_type: Optional[str] = None) -> Future:
        """
        Decode a new source image in the background.

        Parameters return to identity immediately; changes made while the
        decode runs are kept and rendered as soon as it completes. A load
        superseded by a later load is discarded.

        Args:
            data: Encoded image bytes
            mime_type: Declared MIME type

        Returns:
            Future resolving to the decoded ImageBuffer, or raising
            DecodeFailure / StaleResultDiscarded, or any other error the
            decoder raised
        """
        with self._lock:
            self._check_open()
            self._load_sequence += 1
            load_sequence = self._load_sequence
            self._cancel_timer()
            # Invalidate renders of the previous image
            self._sequence += 1
            self._source = None
            self._statistics = None
            self._parameters = EnhancementParameters.identity()
            self._in_flight += 1

        try:
            return self.executor.submit(self._decode, load_sequence, data, mime_type)
        except RuntimeError:
            self._finish_task()
            raise

    def set_parameters(self, filters: Optional[FilterParameters] = None,
                       tone_curve: Optional[ToneCurveConfig] = None,
                       toggles: Optional[FeatureToggles] = None) -> EnhancementParameters:
        """
        Replace parts of the parameter state and schedule a debounced render.

        Returns:
            The new parameter snapshot
        """
        with self._lock:
            self._parameters = self._parameters.replace(filters, tone_curve, toggles)
            snapshot = self._parameters
            self._schedule(self.debounce_seconds)
        return snapshot

    def request_render(self):
        """Re-render the current snapshot after the debounce window."""
        with self._lock:
            self._schedule(self.debounce_seconds)

    def reset(self):
        """Return every parameter to identity, keeping the decoded source."""
        with self._lock:
            self._parameters = EnhancementParameters.identity()
            if self._source is not None:
                self._state = OrchestratorState.READY
            self._schedule(self.debounce_seconds)
        logger.info("Parameters reset to identity")

    def auto_enhance(self) -> EnhancementParameters:
        """
        Estimate parameters from the source histogram and apply them wholesale.

        Returns:
            The estimated parameter snapshot

        Raises:
            RenderContextUnavailable: If no image has been decoded
        """
        with self._lock:
            source = self._source
            load_sequence = self._load_sequence
        if source is None:
            raise RenderContextUnavailable("Auto-enhance requires a decoded image")

        statistics = self.analyzer.analyze(source)
        parameters = self.estimator.estimate_parameters(statistics)

        with self._lock:
            if load_sequence != self._load_sequence:
                # A new image was loaded while analyzing; it starts from identity
                raise StaleResultDiscarded(load_sequence, self._load_sequence)
            self._statistics = statistics
            self._parameters = parameters
            self._schedule(self.debounce_seconds)
        return parameters

    def encode_output(self, format: Optional[str] = None, quality: Optional[int] = None) -> bytes:
        """
        Encode the last committed render.

        Raises:
            RenderContextUnavailable: If nothing has been rendered yet
        """
        output = self.output
        if output is None:
            raise RenderContextUnavailable("No rendered output to encode")
        return encode_image(
            output,
            format or get_config_value(self.config, 'output.format', 'JPEG'),
            quality or get_config_value(self.config, 'output.quality', 95),
        )

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no debounce timer is pending and nothing is in flight.

        Returns:
            True if idle, False if the timeout expired
        """
        with self._idle:
            return self._idle.wait_for(
                lambda: self._timer is None and self._in_flight == 0, timeout
            )

    def shutdown(self, wait: bool = True):
        """Stop the debounce timer and the worker thread."""
        with self._lock:
            self._shutdown = True
            self._cancel_timer()
            self._idle.notify_all()
        self.executor.shutdown(wait=wait)
        logger.info(f"FilterChainOrchestrator shut down: {self.stats.get_summary()}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()

    # ------------------------------------------------------------------
    # Scheduling (call with the lock held)
    # ------------------------------------------------------------------

    def _check_open(self):
        if self._shutdown:
            raise RuntimeError("FilterChainOrchestrator is shut down")

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, delay: float):
        """Bump the sequence and restart the debounce timer (last writer wins)."""
        self._check_open()
        self._sequence += 1
        sequence = self._sequence
        self.stats.add_request()
        self._cancel_timer()

        if delay <= 0:
            self._dispatch(sequence)
            return

        self._timer = threading.Timer(delay, self._dispatch, args=(sequence,))
        self._timer.daemon = True
        self._timer.start()

    def _dispatch(self, sequence: int):
        """Hand the current snapshot to the worker if it is still the latest request."""
        with self._lock:
            if sequence != self._sequence:
                # A newer request restarted the timer
                return
            self._timer = None

            if self._source is None or self._shutdown:
                self._idle.notify_all()
                return

            request = RenderRequest(
                sequence=sequence,
                source=self._source,
                parameters=self._parameters,
            )
            self._in_flight += 1

            try:
                self.executor.submit(self._render, request)
            except RuntimeError:
                logger.warning(f"Render #{sequence} dropped: worker is shut down")
                self._in_flight -= 1
                self._idle.notify_all()

    def _finish_task(self):
        with self._lock:
            self._in_flight -= 1
            self._idle.notify_all()

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _decode(self, load_sequence: int, data: bytes,
                mime_type: Optional[str]) -> ImageBuffer:
        """Decode on the worker; install the image unless a newer load superseded it."""
        try:
            try:
                image = decode_image(data, mime_type)
            except Exception as e:
                with self._lock:
                    superseded = load_sequence != self._load_sequence
                    if not superseded:
                        self._source = None
                        self._output = None
                        self._state = OrchestratorState.ERROR
                if superseded:
                    raise StaleResultDiscarded(load_sequence, self._load_sequence) from e
                logger.error(f"Image decode failed: {e}")
                self._notify_error(e)
                raise

            with self._lock:
                if load_sequence != self._load_sequence:
                    self._log.debug("Discarding superseded decode",
                                    load=load_sequence, latest=self._load_sequence)
                    raise StaleResultDiscarded(load_sequence, self._load_sequence)

                # Keep parameters set while decoding
                self._source = image
                self._output = None
                self._state = OrchestratorState.READY
                if not self._shutdown:
                    # Decode completion renders immediately, without the debounce
                    self._schedule(0)

            logger.info(f"Loaded {image.width}x{image.height} image")
            return image
        finally:
            self._finish_task()

    def _render(self, request: RenderRequest):
        """Run the pipeline for one request and commit it if still current."""
        start_time = time.time()
        try:
            with self._lock:
                if request.sequence == self._sequence:
                    self._state = OrchestratorState.PROCESSING
            try:
                result = self.chain.run(request.source, request.parameters)
            except Exception as e:
                self._handle_render_failure(request, e)
                return

            render_time = time.time() - start_time
            with self._lock:
                committed = (request.sequence == self._sequence
                             and request.sequence > self._committed_sequence)
                if committed:
                    self._output = result
                    self._committed_sequence = request.sequence
                    self._state = OrchestratorState.RENDERED
                self.stats.add_result(committed, render_time)

            if not committed:
                stale = StaleResultDiscarded(request.sequence, self._sequence)
                self._log.debug(str(stale), render_time=round(render_time, 4))
                return

            self._log.debug("Render committed", sequence=request.sequence,
                            render_time=round(render_time, 4))
            if self.on_rendered:
                try:
                    self.on_rendered(result)
                except Exception as e:
                    logger.error(f"on_rendered callback failed: {e}")
        finally:
            self._finish_task()

    def _handle_render_failure(self, request: RenderRequest, error: Exception):
        """Discard the whole recompute; surface the error unless it was superseded."""
        with self._lock:
            superseded = request.sequence != self._sequence
            if not superseded:
                self._state = OrchestratorState.ERROR
                self.stats.add_error(request.sequence, str(error))
            else:
                self.stats.add_result(False)

        if superseded:
            self._log.debug("Superseded render failed", sequence=request.sequence, error=str(error))
            return

        logger.error(f"Render #{request.sequence} failed: {error}")
        self._notify_error(error)

    def _notify_error(self, error: Exception):
        if self.on_error:
            try:
                self.on_error(error)
            except Exception as e:
                logger.error(f"on_error callback failed: {e}")
