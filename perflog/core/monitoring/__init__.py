from .stats import PipelineStats

__all__ = ["PipelineStats"]
