"""
End-to-end simulation pipelines
"""

from .simulation import SimulationPipeline

__all__ = ['SimulationPipeline']
