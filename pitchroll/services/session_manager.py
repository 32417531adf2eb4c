"""Capture and analysis sessions that own a frame source and timeline."""

import random
import string
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple, Union

import numpy as np
from pubsub import pub

from ..audio.audio_pub import AudioPublisher
from ..audio.wav import load_wav
from ..config import PitchSettings
from ..errors import PitchRollError, SessionStateError
from ..models.events import AudioEvent, SessionEvent
from ..models.pitch import PitchEvent
from ..models.session import SessionInfo, SessionState
from ..timeline.timeline import PitchTimeline
from .detection_service import PitchDetectionService

logger = logging.getLogger(__name__)

AUDIO_TOPIC = "audio.frame"
SESSION_TOPIC = "pitch.session"

ProgressCallback = Callable[[int, int], None]


def new_session_id() -> str:
    """Timestamp-based session ID with a random suffix."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"{timestamp}_{random_suffix}"


def default_capture_factory(callback: Callable[[AudioEvent], None], settings: PitchSettings):
    """Build a PyAudio microphone capture for live sessions."""
    from ..audio.capture import AudioCapture

    return AudioCapture(callback=callback,
                        sample_rate=settings.sample_rate,
                        chunk_size=settings.chunk_size)


class PitchSession:
    """One capture or analysis run with its own timeline.

    The timeline is created with the session and written only by it. Sessions
    are context managers: entering starts them, leaving stops them.
    """

    mode = "base"

    def __init__(self, settings: PitchSettings,
                 result_callback: Optional[Callable[[PitchEvent], None]] = None,
                 session_topic: str = SESSION_TOPIC):
        self.settings = settings
        self.session_topic = session_topic
        self.timeline = PitchTimeline()
        self.service = PitchDetectionService(settings, self.timeline, result_callback)
        self.cancel_event = threading.Event()
        self.info = SessionInfo(session_id=new_session_id(), mode=self.mode,
                                start_time=datetime.now(), stats=self.service.stats)

    @property
    def session_id(self) -> str:
        return self.info.session_id

    @property
    def state(self) -> SessionState:
        return self.info.state

    @property
    def is_running(self) -> bool:
        return self.info.state == SessionState.RUNNING

    def _transition(self, state: SessionState, **metadata) -> None:
        self.info.state = state
        if state != SessionState.RUNNING:
            self.info.end_time = datetime.now()
        self.info.stats = self.service.stats
        logger.info(f"Session {self.session_id} ({self.mode}) -> {state.value}")
        pub.sendMessage(self.session_topic, event=SessionEvent(
            session_id=self.session_id,
            event_type=state.value,
            metadata=metadata,
        ))

    def _begin(self) -> None:
        if self.info.state != SessionState.IDLE:
            raise SessionStateError(
                f"Session {self.session_id} cannot start from state {self.info.state.value}")
        self.service.reset()
        self.info.start_time = datetime.now()
        self._transition(SessionState.RUNNING)

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        """Stop as soon as the current frame is finished."""
        self.cancel_event.set()

    def __enter__(self) -> "PitchSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.is_running:
            if exc_type is not None:
                self.cancel()
            else:
                self.stop()


class LiveSession(PitchSession):
    """Microphone session: capture thread -> pub/sub -> detection service.

    Detection errors raised on the capture thread are kept on the session and
    re-raised to the caller from wait() or stop().
    """

    mode = "live"

    def __init__(self, settings: PitchSettings,
                 result_callback: Optional[Callable[[PitchEvent], None]] = None,
                 capture_factory: Callable = default_capture_factory,
                 audio_topic: str = AUDIO_TOPIC,
                 session_topic: str = SESSION_TOPIC):
        super().__init__(settings, result_callback, session_topic)
        self.audio_topic = audio_topic
        self.audio_publisher = AudioPublisher(audio_topic)
        self.capture_factory = capture_factory
        self.audio_capture = None
        self.error: Optional[PitchRollError] = None
        self.limit_reached = threading.Event()
        self.finished = threading.Event()  # limit reached or failed

    def start(self) -> None:
        self._begin()
        self.service.frame_source.start()

        pub.subscribe(self._on_audio_event, self.audio_topic)
        self.audio_capture = self.capture_factory(self.audio_publisher.publish_audio_event,
                                                  self.settings)
        self.audio_capture.start_recording()

    def _on_audio_event(self, event: AudioEvent) -> None:
        if self.cancel_event.is_set() or self.finished.is_set():
            return

        try:
            self.service.on_audio_chunk(event)
        except PitchRollError as e:
            logger.error(f"Session {self.session_id} failed on {event.chunk_id}: {e}")
            self.error = e
            self.finished.set()
            return

        limit = self.settings.max_duration_seconds
        if limit and self.service.frame_source.elapsed() >= limit:
            logger.info(f"Session {self.session_id} reached {limit}s limit")
            self.limit_reached.set()
            self.finished.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the duration limit is reached, detection fails, or timeout elapses.

        Returns:
            True if the duration limit was reached

        Raises:
            PitchRollError: detection failed on the capture thread; the session is stopped
        """
        self.finished.wait(timeout)
        if self.error is not None:
            self.stop()
        return self.limit_reached.is_set()

    def _shutdown(self) -> None:
        if self.audio_capture is not None:
            self.audio_capture.stop_recording()
        try:
            pub.unsubscribe(self._on_audio_event, self.audio_topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

        if self.error is not None:
            self._transition(SessionState.STOPPED, error=True, events=len(self.timeline))
            return
        state = SessionState.CANCELLED if self.cancel_event.is_set() else SessionState.STOPPED
        self._transition(state, events=len(self.timeline),
                         dropped=self.service.stats.frames_dropped)

    def stop(self) -> None:
        if not self.is_running:
            logger.warning(f"Session {self.session_id} is not running")
            return
        self._shutdown()
        if self.error is not None:
            raise self.error

    def cancel(self) -> None:
        super().cancel()
        if self.is_running:
            self._shutdown()


class FileAnalysisSession(PitchSession):
    """Batch analysis of a decoded buffer or WAV file."""

    mode = "file"

    def __init__(self, settings: PitchSettings,
                 source: Union[str, Path, Tuple[np.ndarray, int]],
                 result_callback: Optional[Callable[[PitchEvent], None]] = None,
                 progress_callback: Optional[ProgressCallback] = None,
                 session_topic: str = SESSION_TOPIC):
        super().__init__(settings, result_callback, session_topic)
        self.source = source
        self.progress_callback = progress_callback
        if isinstance(source, (str, Path)):
            self.info.source = str(source)

    def _load(self) -> Tuple[np.ndarray, int]:
        if isinstance(self.source, (str, Path)):
            return load_wav(self.source)
        samples, sample_rate = self.source
        return np.asarray(samples, dtype=np.float64), int(sample_rate)

    def steps(self) -> Iterator[Tuple[int, int]]:
        """Run the analysis cooperatively, yielding progress between chunks.

        Closing the generator early cancels the session.
        """
        self._begin()
        finished = False
        try:
            if not self.cancel_event.is_set():
                samples, sample_rate = self._load()
                for done, total in self.service.iter_analysis(samples, sample_rate):
                    if self.progress_callback:
                        self.progress_callback(done, total)
                    yield done, total
                    if self.cancel_event.is_set():
                        break
            finished = True
        except Exception:
            self._transition(SessionState.STOPPED, error=True)
            raise
        finally:
            if not finished and self.is_running:
                self.cancel_event.set()
                self._transition(SessionState.CANCELLED, events=len(self.timeline))

        if self.cancel_event.is_set():
            self._transition(SessionState.CANCELLED, events=len(self.timeline))
        else:
            self._transition(SessionState.COMPLETED, events=len(self.timeline))

    def run(self) -> PitchTimeline:
        """Analyse the whole source synchronously."""
        for _ in self.steps():
            pass
        return self.timeline

    def start(self) -> None:
        self.run()

    def stop(self) -> None:
        self.cancel()


class SessionManager:
    """Keeps at most one active session; starting a new one stops the old one."""

    def __init__(self, settings: PitchSettings,
                 result_callback: Optional[Callable[[PitchEvent], None]] = None,
                 capture_factory: Callable = default_capture_factory):
        self.settings = settings
        self.result_callback = result_callback
        self.capture_factory = capture_factory
        self.current: Optional[PitchSession] = None
        logger.info("SessionManager initialized")

    def _replace_current(self, session: PitchSession) -> None:
        if self.current is not None and self.current.is_running:
            logger.info(f"Stopping session {self.current.session_id} for a new one")
            self.current.cancel()
        self.current = session

    def start_live(self) -> LiveSession:
        session = LiveSession(self.settings, self.result_callback, self.capture_factory)
        self._replace_current(session)
        session.start()
        return session

    def analyze(self, source: Union[str, Path, Tuple[np.ndarray, int]],
                progress_callback: Optional[ProgressCallback] = None) -> FileAnalysisSession:
        session = FileAnalysisSession(self.settings, source, self.result_callback,
                                      progress_callback)
        self._replace_current(session)
        session.run()
        return session

    def stop(self) -> None:
        if self.current is not None and self.current.is_running:
            self.current.stop()
