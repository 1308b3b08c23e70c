"""Tests for HTTP endpoints."""

import gzip

import pytest
from httpx import ASGITransport, AsyncClient

from url_shortener.lib.database.memory import InMemoryRepository
from url_shortener.lib.service import URLShortenerService
from url_shortener.web_app import create_app

from conftest import BASE_URL


@pytest.mark.asyncio
class TestTextEndpoints:
    """Test the plain-text shorten and redirect routes."""

    async def test_shorten_text(self, client, sample_urls):
        """Test POST / with a raw URL body."""
        response = await client.post("/", content=sample_urls[0])

        assert response.status_code == 201
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith(BASE_URL)

    async def test_shorten_text_existing(self, client, sample_urls):
        """Test POST / for an already shortened URL returns 409 and the same link."""
        first = await client.post("/", content=sample_urls[0])
        second = await client.post("/", content=sample_urls[0])

        assert second.status_code == 409
        assert second.text == first.text

    async def test_shorten_text_strips_whitespace(self, client, sample_urls):
        """Test surrounding whitespace in the body is ignored."""
        response = await client.post("/", content=f"  {sample_urls[0]}\n")

        assert response.status_code == 201

    async def test_shorten_text_invalid(self, client):
        """Test POST / with invalid URLs."""
        assert (await client.post("/", content="not-a-url")).status_code == 400
        assert (await client.post("/", content="")).status_code == 400
        assert (await client.post("/", content=b"\xff\xfe")).status_code == 400

    async def test_redirect(self, client, sample_urls):
        """Test GET /{short_code} redirects to the original URL."""
        link = (await client.post("/", content=sample_urls[0])).text
        short_code = link.rsplit("/", 1)[1]

        response = await client.get(f"/{short_code}", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == sample_urls[0]

    async def test_redirect_not_found(self, client):
        """Test GET /{short_code} for an unknown code."""
        response = await client.get("/nonexistent", follow_redirects=False)

        assert response.status_code == 404

    async def test_ping_without_durable_backend(self, client):
        """Test GET /ping fails when no durable backend is configured."""
        response = await client.get("/ping")

        assert response.status_code == 500

    async def test_ping_with_file_backend(self, config, logger, tmp_path):
        """Test GET /ping succeeds for a writable snapshot file."""
        from url_shortener.lib.database.persisted import FileBackedRepository

        repo = await FileBackedRepository.open(str(tmp_path / "data.json"), logger=logger)
        app = create_app(URLShortenerService(repo, BASE_URL, logger=logger), config, logger)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost:8080") as ac:
            response = await ac.get("/ping")

        assert response.status_code == 200


@pytest.mark.asyncio
class TestAPIEndpoints:
    """Test the JSON API."""

    async def test_shorten_url(self, client, sample_urls):
        """Test POST /api/shorten."""
        response = await client.post("/api/shorten", json={"url": sample_urls[0]})

        assert response.status_code == 201
        data = response.json()
        assert data["result"].startswith(BASE_URL)

    async def test_shorten_existing(self, client, sample_urls):
        """Test POST /api/shorten for a URL shortened before."""
        first = await client.post("/api/shorten", json={"url": sample_urls[0]})
        second = await client.post("/api/shorten", json={"url": sample_urls[0]})

        assert second.status_code == 409
        assert second.json()["result"] == first.json()["result"]

    async def test_shorten_invalid_url(self, client):
        """Test POST /api/shorten with invalid URL."""
        response = await client.post("/api/shorten", json={"url": "not-a-url"})

        assert response.status_code == 400
        assert "Invalid URL" in response.json()["detail"]

    async def test_shorten_malformed_body(self, client):
        """Test malformed JSON bodies answer 400."""
        response = await client.post(
            "/api/shorten", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

        response = await client.post("/api/shorten", json={"link": "https://example.com"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request body"

    async def test_batch(self, client, sample_urls):
        """Test POST /api/shorten/batch."""
        body = [
            {"correlation_id": str(i), "original_url": url}
            for i, url in enumerate(sample_urls)
        ]

        response = await client.post("/api/shorten/batch", json=body)

        assert response.status_code == 201
        data = response.json()
        assert [d["correlation_id"] for d in data] == ["0", "1", "2"]
        assert all(d["short_url"].startswith(BASE_URL) for d in data)

    async def test_batch_with_existing(self, client, sample_urls):
        """Test batch containing a known URL answers 409 with every link."""
        existing = (await client.post("/api/shorten", json={"url": sample_urls[0]})).json()["result"]
        body = [
            {"correlation_id": "a", "original_url": sample_urls[0]},
            {"correlation_id": "b", "original_url": sample_urls[1]},
        ]

        response = await client.post("/api/shorten/batch", json=body)

        assert response.status_code == 409
        data = response.json()
        assert data[0] == {"correlation_id": "a", "short_url": existing}
        assert data[1]["correlation_id"] == "b"

    async def test_batch_duplicate(self, client, sample_urls):
        """Test repeated URL in one batch answers 400."""
        body = [
            {"correlation_id": "a", "original_url": sample_urls[0]},
            {"correlation_id": "b", "original_url": sample_urls[0]},
        ]

        response = await client.post("/api/shorten/batch", json=body)

        assert response.status_code == 400

    async def test_batch_invalid_url(self, client):
        """Test invalid URL in a batch answers 400."""
        body = [{"correlation_id": "a", "original_url": "not-a-url"}]

        response = await client.post("/api/shorten/batch", json=body)

        assert response.status_code == 400

    async def test_batch_empty(self, client):
        """Test empty batch answers 201 with an empty list."""
        response = await client.post("/api/shorten/batch", json=[])

        assert response.status_code == 201
        assert response.json() == []

    async def test_batch_not_a_list(self, client):
        """Test a non-array batch body answers 400."""
        response = await client.post("/api/shorten/batch", json={"correlation_id": "a"})

        assert response.status_code == 400


@pytest.mark.asyncio
class TestGzip:
    """Test gzip request and response handling."""

    async def test_gzip_request_body(self, client, sample_urls):
        """Test gzip-compressed request bodies are accepted."""
        response = await client.post(
            "/",
            content=gzip.compress(sample_urls[0].encode()),
            headers={"Content-Encoding": "gzip"},
        )

        assert response.status_code == 201
        assert response.text.startswith(BASE_URL)

    async def test_gzip_json_request_body(self, client, sample_urls):
        """Test gzip-compressed JSON bodies are accepted."""
        response = await client.post(
            "/api/shorten",
            content=gzip.compress(f'{{"url": "{sample_urls[0]}"}}'.encode()),
            headers={"Content-Encoding": "gzip", "Content-Type": "application/json"},
        )

        assert response.status_code == 201

    async def test_invalid_gzip_body(self, client):
        """Test corrupt gzip bodies answer 400."""
        response = await client.post(
            "/", content=b"definitely not gzip", headers={"Content-Encoding": "gzip"}
        )

        assert response.status_code == 400

    async def test_gzip_response(self, client, sample_urls):
        """Test responses are compressed when the client accepts gzip."""
        response = await client.post(
            "/", content=sample_urls[0], headers={"Accept-Encoding": "gzip"}
        )

        assert response.headers.get("content-encoding") == "gzip"
        # httpx decodes transparently
        assert response.text.startswith(BASE_URL)


@pytest.mark.asyncio
class TestBasePath:
    """Test short links under a base URL path."""

    async def test_redirect_under_base_path(self, monkeypatch, logger, sample_urls):
        """Test redirects are served under the base URL's path."""
        from url_shortener.config import Config

        for name in ("SERVER_ADDRESS", "BASE_URL", "FILE_STORAGE_PATH", "DATABASE_DSN"):
            monkeypatch.delenv(name, raising=False)
        config = Config(
            server_address="localhost:8080",
            base_url="http://localhost:8080/s/",
            file_storage_path="",
            _env_file=None,
        )
        service = URLShortenerService(InMemoryRepository(), config.base_url, logger=logger)
        app = create_app(service, config, logger)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost:8080") as ac:
            link = (await ac.post("/", content=sample_urls[0])).text
            assert link.startswith("http://localhost:8080/s/")

            response = await ac.get(link, follow_redirects=False)
            assert response.status_code == 307
            assert response.headers["location"] == sample_urls[0]
