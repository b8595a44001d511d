"""Core domain models and pipeline counters."""
