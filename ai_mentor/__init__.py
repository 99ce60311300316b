"""AI mentor conversation pipeline for the LMS."""

__version__ = "0.1.0"
