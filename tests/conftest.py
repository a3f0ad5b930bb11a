"""Shared test fixtures for atrest."""

import io
import tempfile

import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody

from atrest.config_schema import CryptoConfig

# Low iteration count keeps the suite fast; derivation is otherwise identical
FAST_ITERATIONS = 1_000


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def crypto_config():
    return CryptoConfig(secret="s3cr3t", salt="pepper", iterations=FAST_ITERATIONS)


class FakeS3Client:
    """Just enough of the boto3 S3 client surface, backed by a dict."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[tuple[str, dict]] = []

    @staticmethod
    def _error(code: str, operation: str) -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": code}}, operation)

    def put_object(self, **params):
        self.calls.append(("put_object", params))
        self.objects[(params["Bucket"], params["Key"])] = params["Body"]
        return {"ETag": '"fake"'}

    def get_object(self, **params):
        self.calls.append(("get_object", params))
        try:
            data = self.objects[(params["Bucket"], params["Key"])]
        except KeyError:
            raise self._error("NoSuchKey", "GetObject") from None
        return {"Body": StreamingBody(io.BytesIO(data), len(data))}

    def head_object(self, **params):
        self.calls.append(("head_object", params))
        if (params["Bucket"], params["Key"]) not in self.objects:
            raise self._error("404", "HeadObject")
        return {}

    def delete_object(self, **params):
        self.calls.append(("delete_object", params))
        self.objects.pop((params["Bucket"], params["Key"]), None)
        return {}


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def log_messages():
    """Collect loguru records emitted during the test."""
    from loguru import logger

    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
