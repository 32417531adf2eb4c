"""Audio chunk publishing for the live detection pipeline."""

import logging
from typing import Optional

from pubsub import pub
from ..models.events import AudioEvent

logger = logging.getLogger(__name__)


class AudioPublisher:
    """Publishes captured chunks and counts gaps in their sequence numbers.

    A gap means the capture side lost chunks to a stream overflow.
    """

    def __init__(self, topic: str = "audio.frame"):
        """Initialize audio publisher.

        Args:
            topic: Pub/sub topic name for audio events
        """
        self.topic = topic
        self.published_chunks = 0
        self.missed_chunks = 0
        self._last_sequence: Optional[int] = None
        logger.info(f"AudioPublisher initialized with topic: {topic}")

    def publish_audio_event(self, audio_event: AudioEvent) -> None:
        """Publish an audio event to the pub/sub topic.

        Args:
            audio_event: AudioEvent to publish
        """
        sequence = audio_event.sequence_number
        if self._last_sequence is not None and sequence > self._last_sequence + 1:
            missed = sequence - self._last_sequence - 1
            self.missed_chunks += missed
            logger.warning(f"Missed {missed} audio chunks before {audio_event.chunk_id}")
        self._last_sequence = sequence
        self.published_chunks += 1

        logger.debug(f"Publishing {audio_event.chunk_id} (seq {sequence}, "
                     f"{len(audio_event.samples)} samples{', final' if audio_event.final else ''})")
        pub.sendMessage(self.topic, event=audio_event)
