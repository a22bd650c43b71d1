"""Workflow State Engine.

Defines finite-state workflows, validates their definitions, and drives
instances forward one action at a time with an append-only history.
"""

__version__ = "0.1.0"

from workflow_engine.engine.config import EngineSettings

__all__ = ["__version__", "EngineSettings"]
