"""Local CSV-driven song feature clustering pipeline."""

__all__ = [
    "errors",
    "config",
    "entities",
    "graph",
    "clustering",
    "dedup",
    "aggregate",
    "analysis",
    "io",
    "report",
]
