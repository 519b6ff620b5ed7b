"""
Configuration management for the taxi trip ETL pipeline

Settings are plain values built from the environment and handed to the
pipeline and loader constructors; nothing here is a module-level singleton.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from trip_etl.utils.exceptions import ConfigurationError


AMBIGUOUS_TIME_POLICIES = ("raise", "standard", "daylight")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes')


@dataclass
class SnowflakeConfig:
    """Snowflake connection configuration"""
    account: str
    username: str
    password: str
    warehouse: str
    database: str
    schema: str
    role: Optional[str] = None
    table_name: str = "TAXI_TRIPS"

    @classmethod
    def from_env(cls) -> 'SnowflakeConfig':
        """Load Snowflake config from environment variables"""
        return cls(
            account=os.getenv('SNOWFLAKE_ACCOUNT', ''),
            username=os.getenv('SNOWFLAKE_USERNAME', ''),
            password=os.getenv('SNOWFLAKE_PASSWORD', ''),
            warehouse=os.getenv('SNOWFLAKE_WAREHOUSE', 'COMPUTE_WH'),
            database=os.getenv('SNOWFLAKE_DATABASE', 'TAXI_DB'),
            schema=os.getenv('SNOWFLAKE_SCHEMA', 'PUBLIC'),
            role=os.getenv('SNOWFLAKE_ROLE'),
            table_name=os.getenv('SNOWFLAKE_TABLE', 'TAXI_TRIPS')
        )


@dataclass
class PipelineConfig:
    """Run options for a single ETL invocation"""
    source_time_zone: str = "America/New_York"
    ambiguous_time_policy: str = "raise"
    export_duplicates: bool = False
    duplicates_path: Path = field(default_factory=lambda: Path("duplicates.csv"))
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    def __post_init__(self):
        self.duplicates_path = Path(self.duplicates_path)
        self.log_level = self.log_level.upper()

        if self.ambiguous_time_policy not in AMBIGUOUS_TIME_POLICIES:
            raise ConfigurationError(
                f"Unknown ambiguous time policy: {self.ambiguous_time_policy}",
                context={'allowed': ", ".join(AMBIGUOUS_TIME_POLICIES)}
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load run options from environment variables"""
        return cls(
            source_time_zone=os.getenv('SOURCE_TIME_ZONE', 'America/New_York'),
            ambiguous_time_policy=os.getenv('AMBIGUOUS_TIME_POLICY', 'raise'),
            export_duplicates=_env_flag('EXPORT_DUPLICATES'),
            duplicates_path=os.getenv('DUPLICATES_PATH', 'duplicates.csv'),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_dir=os.getenv('LOG_DIR')
        )


class Settings:
    """
    Aggregates warehouse and run configuration
    """

    def __init__(self, snowflake: SnowflakeConfig, pipeline: PipelineConfig):
        self.snowflake = snowflake
        self.pipeline = pipeline

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from the current environment"""
        return cls(
            snowflake=SnowflakeConfig.from_env(),
            pipeline=PipelineConfig.from_env()
        )

    def validate(self) -> bool:
        """
        Validate that the warehouse credentials are present

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        required_snowflake_fields = [
            self.snowflake.account,
            self.snowflake.username,
            self.snowflake.password
        ]
        return all(required_snowflake_fields)
