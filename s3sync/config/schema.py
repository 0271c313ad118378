"""
Configuration Schema and Models

Defines Pydantic models for the configuration schema, providing validation,
default values, and type checking for all configuration options.

Author: s3sync Project
License: MIT
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, validator
from boto3.s3.transfer import TransferConfig

MB = 1024 * 1024


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_file_path: str = Field(
        default="logs/s3sync.log",
        description="Path to log file"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )
    json_format: bool = Field(
        default=False,
        description="Emit log records as JSON"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TransferSettings(BaseModel):
    """Options of the multipart upload/download layer for a single file."""

    multipart_threshold: int = Field(
        default=8 * MB,
        description="File size above which multipart transfers are used (bytes)"
    )
    multipart_chunksize: int = Field(
        default=8 * MB,
        description="Part size of multipart transfers (bytes)"
    )
    max_concurrency: int = Field(
        default=10,
        description="Parallel connections used for one file"
    )
    use_threads: bool = Field(
        default=True,
        description="Use threads for the transfer of one file"
    )

    @validator("multipart_threshold", "multipart_chunksize", "max_concurrency")
    def validate_positive(cls, v):
        """Ensure sizes and counts are positive."""
        if v < 1:
            raise ValueError(f"Transfer setting must be positive: {v}")
        return v

    def to_transfer_config(self) -> TransferConfig:
        """Build the boto3 TransferConfig for these settings."""
        return TransferConfig(
            multipart_threshold=self.multipart_threshold,
            multipart_chunksize=self.multipart_chunksize,
            max_concurrency=self.max_concurrency,
            use_threads=self.use_threads
        )


class AwsConfig(BaseModel):
    """Connection settings for the S3 client."""

    region: Optional[str] = Field(
        default=None,
        description="AWS region (None uses the SDK default chain)"
    )
    profile_name: Optional[str] = Field(
        default=None,
        description="AWS CLI profile name"
    )
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom S3 endpoint (MinIO, LocalStack, ...)"
    )
    force_path_style: bool = Field(
        default=False,
        description="Use https://host/BUCKET/KEY instead of virtual-hosted style"
    )
    max_attempts: int = Field(
        default=3,
        description="Retry attempts of the S3 client"
    )


class SyncConfig(BaseModel):
    """Behaviour of a sync run."""

    parallel: int = Field(
        default=16,
        description="Number of files synced in parallel"
    )
    delete: bool = Field(
        default=False,
        description="Delete destination files that do not exist in the source"
    )
    dry_run: bool = Field(
        default=False,
        description="Only log what would be done"
    )
    acl: Optional[str] = Field(
        default=None,
        description="Canned ACL applied to uploaded objects"
    )
    content_type: Optional[str] = Field(
        default=None,
        description="Content type forced on every uploaded object"
    )
    guess_mime: bool = Field(
        default=True,
        description="Guess the content type of uploaded files"
    )
    transfer: TransferSettings = Field(default_factory=TransferSettings)

    class Config:
        """Pydantic configuration."""
        frozen = True

    @validator("parallel")
    def validate_parallel(cls, v):
        """Ensure at least one worker."""
        if v < 1:
            raise ValueError(f"parallel must be a positive integer: {v}")
        return v

    @validator("acl", "content_type", pre=True)
    def blank_to_none(cls, v):
        """Treat empty strings as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Config(BaseModel):
    """
    Root configuration model for s3sync.

    Loaded from s3sync.yaml and overridable by environment variables.
    """

    sync: SyncConfig = Field(default_factory=SyncConfig)
    aws: AwsConfig = Field(default_factory=AwsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        validate_assignment = True
