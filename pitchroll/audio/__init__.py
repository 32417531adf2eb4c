"""Audio decoding and framing module.

Microphone capture lives in ``pitchroll.audio.capture`` and is imported
explicitly, since it needs PortAudio at import time.
"""

from .audio_pub import AudioPublisher
from .frames import LiveFrameSource, frames_from_buffer, count_frames
from .wav import load_wav

__all__ = [
    'AudioPublisher',
    'LiveFrameSource',
    'frames_from_buffer',
    'count_frames',
    'load_wav',
]
