"""Motion-sensor processing."""

from dreambreeze.sensors.posture import PostureClassifier

__all__ = ["PostureClassifier"]
