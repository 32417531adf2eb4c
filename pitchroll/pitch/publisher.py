"""Pitch event publisher module for pub/sub event publishing."""

import logging
from typing import Callable
from pubsub import pub
from ..models.pitch import PitchEvent

logger = logging.getLogger(__name__)


class PitchPublisher:
    """Publishes accepted pitch events using pubsub.pub."""

    def __init__(self, topic: str = "pitch.events"):
        """Initialize pitch publisher.

        Args:
            topic: Pub/sub topic name for pitch events
        """
        self.topic = topic
        logger.info(f"PitchPublisher initialized with topic: {topic}")

    def publish_pitch_event(self, event: PitchEvent) -> None:
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published pitch event: {event.note} {event.frequency:.1f}Hz at {event.time:.3f}s")

    def get_callback(self) -> Callable[[PitchEvent], None]:
        """Get callback function for PitchDetectionService to use."""
        return self.publish_pitch_event
