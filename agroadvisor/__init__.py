"""AgroAdvisor - deterministic agronomic recommendation engine."""

__version__ = "1.0.0"
