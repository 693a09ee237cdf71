"""
RICE Prioritizer
================

Deterministic RICE scoring and ranking of a product backlog, augmented with
generated rationale text that never changes a score or a rank.

Packages:
    - scoring: scorer, ranker, sensitivity, summary, rationale merge
    - export: markdown and tabular renderings
    - ai: LLM client and rationale generator
    - orchestrator: pipeline, CLI, logging
    - api: FastAPI application
    - data: configuration and sample backlogs
"""

__version__ = "0.1.0"
