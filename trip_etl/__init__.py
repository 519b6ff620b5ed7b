"""
Taxi Trip ETL Pipeline

Cleans, localizes and deduplicates taxi trip CSV exports and bulk-loads
the unique trips into a Snowflake table.
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
