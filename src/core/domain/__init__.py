"""Domain models and entities.

- Pure, strict data structures (Pydantic v2).
- The domain knows nothing about subprocesses, git, the CLI or HTTP: only
  events, workflow definitions and job outcomes.
"""
