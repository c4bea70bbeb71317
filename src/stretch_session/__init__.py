"""Guided stretch sessions: timed exercise runner with access gating."""

__version__ = "0.3.0"
