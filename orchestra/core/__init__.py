"""
Core logic for the orchestration system.

This subpackage provides the agent contract, conversation types, chat
storage, request classifiers, the orchestrator that routes requests to
agents, the model router, and prompt management utilities.
"""

__all__ = [
    "agent",
    "types",
    "storage",
    "classifier",
    "orchestrator",
    "router",
    "prompts",
]
