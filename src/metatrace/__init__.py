"""Daily execution scoring and body-composition trajectory simulation."""

__version__ = "0.1.0"
