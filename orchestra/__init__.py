"""
Orchestra package root.

This package provides configuration loading utilities, the agent
contract and orchestrator, model providers, and concrete agents.
"""

__all__ = [
    "config",
    "core",
    "models",
    "agents",
]
