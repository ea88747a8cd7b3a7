"""DreamBreeze — sleep posture classification and multi-agent actuator arbitration."""

__version__ = "0.1.0"
