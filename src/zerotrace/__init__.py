"""zerotrace: cross-host artifact correlation and patient-zero ranking."""

__version__ = "0.1.0"
