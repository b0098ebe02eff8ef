"""
Unit tests for the ingestion service.
"""

import asyncio

import pytest

from msgrelay.exceptions import BackingStoreUnavailable, MessageValidationError
from msgrelay.ingestion.service import IngestionService, extract_message
from tests.helpers import TEST_QUEUE_NAME, InMemoryQueueStore


class TestExtractMessage:
    """Tests for body normalization."""

    def test_raw_text_is_trimmed(self):
        assert extract_message(b"  hello from curl \n", "text/plain") == "hello from curl"

    def test_raw_text_without_content_type(self):
        assert extract_message(b"hello", None) == "hello"

    def test_json_message_field(self):
        body = b'{"message": "  hello json  "}'
        assert extract_message(body, "application/json") == "hello json"

    def test_json_content_type_is_case_insensitive(self):
        body = b'{"message": "hi"}'
        assert extract_message(body, "Application/JSON; charset=utf-8") == "hi"

    def test_json_body_with_plain_content_type_is_kept_verbatim(self):
        body = b'{"message": "hi"}'
        assert extract_message(body, "text/plain") == '{"message": "hi"}'

    def test_invalid_json_falls_back_to_raw_body(self):
        assert extract_message(b"not json at all", "application/json") == "not json at all"

    def test_json_without_message_field_is_empty(self):
        assert extract_message(b'{"other": "x"}', "application/json") == ""

    def test_json_non_string_message_falls_back_to_raw_body(self):
        """Test a message that is not a string keeps the whole body."""
        assert extract_message(b'{"message": 42}', "application/json") == '{"message": 42}'
        assert extract_message(b'{"message": true}', "application/json") == '{"message": true}'

    def test_json_null_message_is_empty(self):
        assert extract_message(b'{"message": null}', "application/json") == ""
        assert extract_message(b"null", "application/json") == ""

    def test_json_key_is_case_insensitive(self):
        assert extract_message(b'{"Message": " hi "}', "application/json") == "hi"

    def test_json_exact_key_wins_over_folded_key(self):
        body = b'{"MESSAGE": "folded", "message": "exact"}'
        assert extract_message(body, "application/json") == "exact"

    def test_json_array_falls_back_to_raw_body(self):
        assert extract_message(b'["hi"]', "application/json") == '["hi"]'

    def test_whitespace_only_is_empty(self):
        assert extract_message(b" \t\r\n ", None) == ""

    def test_invalid_utf8_is_replaced(self):
        assert extract_message(b"caf\xe9", None) == "caf�"


class TestIngestionService:
    """Tests for IngestionService."""

    @pytest.fixture
    def service(self, queue_store: InMemoryQueueStore) -> IngestionService:
        return IngestionService(
            queue_store=queue_store,
            queue_name=TEST_QUEUE_NAME,
            enqueue_timeout=0.1,
            health_timeout=0.1,
        )

    @pytest.mark.asyncio
    async def test_submit_enqueues_message(self, service, queue_store):
        """Test a raw submission lands on the queue."""
        response = await service.submit(b"hello", "text/plain")

        assert response.enqueued is True
        assert response.queue == TEST_QUEUE_NAME
        assert response.message == "hello"
        assert queue_store.contents(TEST_QUEUE_NAME) == ["hello"]

    @pytest.mark.asyncio
    async def test_submit_json(self, service, queue_store):
        response = await service.submit(b'{"message":"hello json"}', "application/json")

        assert response.message == "hello json"
        assert queue_store.contents(TEST_QUEUE_NAME) == ["hello json"]

    @pytest.mark.asyncio
    async def test_submit_empty_is_rejected(self, service, queue_store):
        """Test empty payloads never reach the queue."""
        with pytest.raises(MessageValidationError):
            await service.submit(b"   ", None)

        assert await queue_store.length(TEST_QUEUE_NAME) == 0

    @pytest.mark.asyncio
    async def test_submit_is_not_idempotent(self, service, queue_store):
        """Test identical payloads produce independent entries."""
        await service.submit(b"hello", None)
        await service.submit(b"hello", None)

        assert queue_store.contents(TEST_QUEUE_NAME) == ["hello", "hello"]

    @pytest.mark.asyncio
    async def test_submit_store_unavailable(self, service, queue_store):
        queue_store.available = False

        with pytest.raises(BackingStoreUnavailable):
            await service.submit(b"hello", None)

        queue_store.available = True
        assert await queue_store.length(TEST_QUEUE_NAME) == 0

    @pytest.mark.asyncio
    async def test_submit_store_timeout(self, service, queue_store):
        """Test a push exceeding the deadline is reported as unavailable."""
        queue_store.push_delay = 1.0

        with pytest.raises(BackingStoreUnavailable, match="timed out"):
            await service.submit(b"slow", None)

        assert await queue_store.length(TEST_QUEUE_NAME) == 0

    @pytest.mark.asyncio
    async def test_check_health_ok(self, service):
        await service.check_health()

    @pytest.mark.asyncio
    async def test_check_health_store_down(self, service, queue_store):
        queue_store.available = False

        with pytest.raises(BackingStoreUnavailable, match="connection refused"):
            await service.check_health()

    @pytest.mark.asyncio
    async def test_check_health_timeout(self, service, queue_store):
        async def slow_ping():
            await asyncio.sleep(1.0)

        queue_store.ping = slow_ping

        with pytest.raises(BackingStoreUnavailable, match="timed out"):
            await service.check_health()
