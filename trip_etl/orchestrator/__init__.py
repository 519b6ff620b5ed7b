"""Pipeline orchestration"""

from .trip_pipeline import TripEtlPipeline, RunResult

__all__ = ['TripEtlPipeline', 'RunResult']
