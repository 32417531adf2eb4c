"""Microphone capture with chunk publishing for the detection pipeline."""

import pyaudio
import time
import logging
from threading import Thread, Event
from typing import Optional, Callable
from datetime import datetime

import numpy as np

from ..models.audio import CaptureStats
from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous float32 microphone capture that hands each chunk to a callback.

    Echo cancellation, noise suppression and automatic gain must be disabled at
    the device level; PortAudio delivers the raw signal and nothing here
    filters it.
    """

    def __init__(
        self,
        callback: Callable[[AudioEvent], None],
        sample_rate: int = 44100,
        chunk_size: int = 1024,
        channels: int = 1,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Called on the capture thread with every AudioEvent
            sample_rate: Audio sample rate in Hz
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels; only the first is published
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = pyaudio.paFloat32

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        # PyAudio instance
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        # Wait for recording thread to finish
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self) -> pyaudio.Stream:
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __read_audio_chunk(self, stream: pyaudio.Stream) -> np.ndarray:
        raw = stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1

        samples = np.frombuffer(raw, dtype=np.float32)
        if self.channels > 1:
            samples = samples[::self.channels]
        return samples

    def __publish_audio_event(self, samples: np.ndarray) -> None:
        audio_event = AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            samples=samples,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            final=self.stop_event.is_set()
        )
        self.audio_event_callback(audio_event)

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = None
        try:
            stream = self.__open_audio_stream()
            while not self.stop_event.is_set():
                self.__publish_audio_event(self.__read_audio_chunk(stream))
            # Publish final event, so consumers know we are done
            self.__publish_audio_event(self.__read_audio_chunk(stream))
        except Exception as e:
            logger.error(f"Audio capture failed: {e}", exc_info=True)
            raise
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None

    def get_recording_stats(self) -> CaptureStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return CaptureStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
        )

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording:
            self.stop_recording()
