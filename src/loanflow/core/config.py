"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """Loan store configuration (DynamoDB or in-memory)."""

    model_config = {"env_prefix": "LOANFLOW_DYNAMO_"}

    backend: Literal["memory", "dynamodb"] = "dynamodb"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis read-through cache for loan state lookups."""

    model_config = {"env_prefix": "LOANFLOW_REDIS_"}

    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    state_ttl_seconds: int = 300
    namespace: str = "loanflow"


class S3Config(BaseSettings):
    """Raw upload archive configuration."""

    model_config = {"env_prefix": "LOANFLOW_S3_"}

    archive_uploads: bool = False
    bucket: str = "loanflow-uploads"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class IngestConfig(BaseSettings):
    """Parsing and reporting knobs for the ingestion pipeline."""

    model_config = {"env_prefix": "LOANFLOW_INGEST_"}

    header_scan_lines: int = 10
    header_sentinels: list[str] = ["Loan ID", "Prin Bal"]
    max_error_messages: int = 5
    phone_region: str = "US"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "LOANFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = True

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    ingest: IngestConfig = IngestConfig()
