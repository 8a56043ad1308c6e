"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Iterator

from loanflow.core.config import AppSettings
from loanflow.persistence.dynamodb_backend import DynamoDBLoanStore
from loanflow.persistence.memory_backend import MemoryLoanStore
from loanflow.persistence.protocols import ICacheBackend, IFileStore, ILoanStore
from loanflow.persistence.redis_backend import RedisCacheBackend
from loanflow.persistence.s3_backend import S3FileStore

Persistence = tuple[ILoanStore, ICacheBackend | None, IFileStore | None]


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (loan_store, cache, file_store); cache and file_store are
        None when disabled in settings.
    """
    if settings is None:
        settings = AppSettings()

    cache: RedisCacheBackend | None = None
    if settings.redis.enabled:
        cache = RedisCacheBackend.from_config(settings.redis)

    store: ILoanStore
    if settings.dynamodb.backend == "memory":
        store = MemoryLoanStore()
    else:
        store = DynamoDBLoanStore(
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
            cache=cache,
            state_ttl_seconds=settings.redis.state_ttl_seconds,
        )

    file_store: S3FileStore | None = None
    if settings.s3.archive_uploads:
        file_store = S3FileStore(
            bucket=settings.s3.bucket,
            region=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
        )

    return store, cache, file_store


@contextmanager
def open_persistence(settings: AppSettings | None = None) -> Iterator[Persistence]:
    """Acquire backends for one ingestion session and always release them."""
    store, cache, file_store = create_persistence(settings)
    with ExitStack() as stack:
        # Callbacks run last-in first-out, each even if an earlier one raised.
        for resource in (file_store, cache):
            if resource is not None:
                stack.callback(resource.close)  # type: ignore[union-attr]
        stack.callback(store.close)
        yield store, cache, file_store
