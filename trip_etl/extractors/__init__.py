"""Input row sources"""

from .csv_reader import TripCsvReader

__all__ = ['TripCsvReader']
