"""
HTTP clients for the external content and generation providers.

All calls go through ``http_client`` so tests can swap in an
``httpx.MockTransport``. Transport failures, non-2xx responses and non-JSON
bodies are raised as ProviderError.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx
from django.conf import settings

from apps.enrichment.schemas import CreateTaskResponse
from libs.common.errors import ProviderError

logger = logging.getLogger(__name__)

SUPADATA_BASE_URL = "https://api.supadata.ai/v1"
SCRAPE_CREATORS_BASE_URL = "https://api.scrapecreators.com"
FIRECRAWL_BASE_URL = "https://api.firecrawl.dev/v1"
KIE_BASE_URL = "https://api.kie.ai/api/v1"


def http_client(timeout: float | None = None) -> httpx.Client:
    """Create the HTTP client used for every provider call."""
    if timeout is None:
        timeout = getattr(settings, "ENRICHMENT_HTTP_TIMEOUT", 60.0)
    return httpx.Client(timeout=timeout, follow_redirects=True)


def _api_key(setting_name: str) -> str:
    key = getattr(settings, setting_name, "")
    if not key:
        raise ProviderError(f"{setting_name} environment variable not set")
    return key


def _request_json(method: str, url: str, **kwargs) -> dict[str, Any]:
    try:
        with http_client() as client:
            response = client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise ProviderError(f"API request timed out: {url}") from e
    except httpx.RequestError as e:
        raise ProviderError(f"API request error: {e}") from e

    if not response.is_success:
        raise ProviderError(f"API request failed: {response.status_code} {response.reason_phrase}")
    try:
        data = response.json()
    except ValueError as e:
        raise ProviderError("Invalid API response: body is not JSON") from e
    if not isinstance(data, dict):
        raise ProviderError("Invalid API response: expected a JSON object")
    return data


def download(url: str) -> tuple[bytes, str | None]:
    """
    Fetch a binary resource (image, screenshot, thumbnail).

    Returns:
        (content, content_type)
    """
    try:
        with http_client() as client:
            response = client.get(url)
    except httpx.RequestError as e:
        raise ProviderError(f"Download failed: {e}") from e
    if not response.is_success:
        raise ProviderError(f"Download failed: {response.status_code} {response.reason_phrase}")
    return response.content, response.headers.get("content-type")


# YouTube (Supadata)


def fetch_youtube_transcript(url: str) -> dict[str, Any]:
    return _request_json(
        "GET",
        f"{SUPADATA_BASE_URL}/youtube/transcript",
        params={"url": url, "text": "true"},
        headers={"x-api-key": _api_key("SUPADATA_API_KEY")},
    )


def fetch_youtube_metadata(video_id: str) -> dict[str, Any]:
    return _request_json(
        "GET",
        f"{SUPADATA_BASE_URL}/youtube/video",
        params={"id": video_id},
        headers={"x-api-key": _api_key("SUPADATA_API_KEY")},
    )


# TikTok / Twitter / Facebook Ad Library (ScrapeCreators)


def _scrape_creators(path: str, params: dict[str, str]) -> dict[str, Any]:
    return _request_json(
        "GET",
        f"{SCRAPE_CREATORS_BASE_URL}{path}",
        params=params,
        headers={"x-api-key": _api_key("SCRAPE_CREATORS_API_KEY")},
    )


def fetch_tiktok_video(url: str) -> dict[str, Any]:
    return _scrape_creators(
        "/v2/tiktok/video",
        {"url": url, "get_transcript": "true", "trim": "true"},
    )


def fetch_tweet(url: str) -> dict[str, Any]:
    return _scrape_creators("/v1/twitter/tweet", {"url": url})


def fetch_facebook_ad(ad_id: str) -> dict[str, Any]:
    return _scrape_creators(
        "/v1/facebook/adLibrary/ad",
        {"id": ad_id, "get_transcript": "true", "trim": "true"},
    )


# Website (Firecrawl)


def scrape_website(url: str) -> dict[str, Any]:
    return _request_json(
        "POST",
        f"{FIRECRAWL_BASE_URL}/scrape",
        json={
            "url": url,
            "formats": ["markdown"],
            "onlyMainContent": True,
            "actions": [
                {"type": "wait", "milliseconds": 1000},
                {"type": "screenshot"},
            ],
        },
        headers={"Authorization": f"Bearer {_api_key('FIRECRAWL_API_KEY')}"},
    )


# Image generation (Kie)


def create_image_task(prompt: str, callback_url: str) -> str:
    """
    Start an asynchronous image generation.

    Returns:
        Provider task id; the result arrives later on ``callback_url``
    """
    data = _request_json(
        "POST",
        f"{KIE_BASE_URL}/jobs/createTask",
        json={
            "model": getattr(settings, "KIE_IMAGE_MODEL", "google/nano-banana"),
            "callBackUrl": callback_url,
            "input": {
                "prompt": prompt,
                "output_format": "png",
                "image_size": "1:1",
            },
        },
        headers={"Authorization": f"Bearer {_api_key('KIE_API_KEY')}"},
    )
    response = CreateTaskResponse.model_validate(data)
    if response.code != 200 or not response.task_id:
        raise ProviderError(f"Image generation request rejected: {response.msg or 'missing taskId'}")
    return response.task_id
