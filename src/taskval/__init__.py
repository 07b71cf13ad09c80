"""Dataset consistency and feasibility validation for client/worker/task scheduling data."""

__version__ = "0.1.0"
