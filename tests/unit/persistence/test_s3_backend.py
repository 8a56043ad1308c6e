"""Unit tests for S3FileStore using moto."""

from __future__ import annotations

from unittest.mock import patch

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from moto import mock_aws

from loanflow.core.exceptions import FileStoreError
from loanflow.persistence.s3_backend import S3FileStore
from loanflow.persistence.upload_keys import (
    CSV_CONTENT_TYPE,
    XLS_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    content_type_for,
    upload_key,
)

BUCKET = "test-loanflow-uploads"


@pytest.fixture
def s3_client():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def s3_backend(s3_client):
    return S3FileStore(bucket=BUCKET, region="us-east-1")


class TestUploadKeys:
    def test_key_is_scoped_to_session(self):
        assert upload_key("s1", "daily_2024-01-15.csv") == "uploads/s1/daily_2024-01-15.csv"

    def test_client_directories_are_dropped(self):
        assert upload_key("s1", "C:\\Users\\ops\\fc.xlsx") == "uploads/s1/fc.xlsx"
        assert upload_key("s1", "../../etc/fc.xlsx") == "uploads/s1/fc.xlsx"

    def test_content_type_follows_bytes(self, make_xlsx):
        assert content_type_for(make_xlsx(["Loan ID"], [["1"]])) == XLSX_CONTENT_TYPE
        assert content_type_for(b"\xd0\xcf\x11\xe0") == XLS_CONTENT_TYPE
        assert content_type_for(b"Loan ID,Prin Bal") == CSV_CONTENT_TYPE


class TestArchiveUpload:
    def test_returns_key_and_stores_bytes(self, s3_backend):
        key = s3_backend.archive_upload("s1", "daily.csv", b"Loan ID,Prin Bal")
        assert key == "uploads/s1/daily.csv"
        assert s3_backend.read(key) == b"Loan ID,Prin Bal"

    def test_object_carries_content_type_and_session(self, s3_backend, s3_client):
        key = s3_backend.archive_upload("s1", "fc.xls", b"\xd0\xcf\x11\xe0")
        head = s3_client.head_object(Bucket=BUCKET, Key=key)
        assert head["ContentType"] == XLS_CONTENT_TYPE
        assert head["Metadata"] == {"session-id": "s1"}

    def test_missing_bucket_raises(self):
        with mock_aws():
            store = S3FileStore(bucket="no-such-bucket", region="us-east-1")
            with pytest.raises(FileStoreError):
                store.archive_upload("s1", "x.csv", b"x")

    def test_unreachable_endpoint_raises_file_store_error(self, s3_backend):
        unreachable = EndpointConnectionError(endpoint_url="http://localhost:4566")
        with patch.object(s3_backend._client, "put_object", side_effect=unreachable):
            with pytest.raises(FileStoreError, match="Could not connect"):
                s3_backend.archive_upload("s1", "x.csv", b"x")


class TestReadAndList:
    def test_read_missing_key_raises(self, s3_backend):
        with pytest.raises(FileStoreError):
            s3_backend.read("uploads/nope/missing.csv")

    def test_list_uploads_for_session(self, s3_backend):
        s3_backend.archive_upload("s1", "a.csv", b"1")
        s3_backend.archive_upload("s1", "b.csv", b"2")
        s3_backend.archive_upload("s2", "c.csv", b"3")
        assert sorted(s3_backend.list_uploads("s1")) == ["uploads/s1/a.csv", "uploads/s1/b.csv"]
        assert s3_backend.list_uploads("empty") == []
