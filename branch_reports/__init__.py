"""Monthly branch transaction reports for the school administration platform."""

__version__ = "0.1.0"
