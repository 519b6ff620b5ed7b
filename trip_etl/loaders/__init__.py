"""Destinations for processed trips"""

from .snowflake_loader import SnowflakeLoader
from .duplicate_writer import write_duplicates

__all__ = ['SnowflakeLoader', 'write_duplicates']
