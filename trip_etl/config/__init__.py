"""Configuration management module"""

from .settings import Settings, SnowflakeConfig, PipelineConfig, AMBIGUOUS_TIME_POLICIES

__all__ = ['Settings', 'SnowflakeConfig', 'PipelineConfig', 'AMBIGUOUS_TIME_POLICIES']
