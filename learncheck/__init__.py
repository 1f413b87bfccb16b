"""LearnCheck: formative self-assessment quiz service."""

__version__ = "0.1.0"
