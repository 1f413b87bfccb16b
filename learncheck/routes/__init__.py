"""API route modules."""
from learncheck.routes import quiz

__all__ = ["quiz"]
