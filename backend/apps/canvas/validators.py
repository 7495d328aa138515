"""
Validators for node creation input (URLs, ids, prompts).
"""
from __future__ import annotations

import re
from urllib.parse import urlparse

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator

from libs.common.errors import ValidationError

YOUTUBE_ID_RE = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&?]+)")
TWEET_ID_RE = re.compile(r"(?:twitter\.com|x\.com)/\w+/status/(\d+)")
FACEBOOK_AD_ID_RE = re.compile(r"^\d+$")

_url_validator = URLValidator(schemes=["http", "https"])


def _is_valid_url(url: str) -> bool:
    try:
        _url_validator(url)
    except DjangoValidationError:
        return False
    return True


def parse_youtube_video_id(url: str) -> str:
    """
    Extract the video id from a youtube.com/watch or youtu.be URL.

    Raises:
        ValidationError: If no id can be found
    """
    match = YOUTUBE_ID_RE.search(url or "")
    if not match:
        raise ValidationError("Invalid YouTube URL")
    return match.group(1)


def youtube_thumbnail_url(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def parse_tweet_id(url: str) -> str:
    """Extract the status id from a twitter.com or x.com tweet URL."""
    match = TWEET_ID_RE.search(url or "")
    if not match:
        raise ValidationError("Invalid Twitter/X URL. Please provide a valid tweet URL.")
    return match.group(1)


def validate_website_url(url: str) -> str:
    url = (url or "").strip()
    if not _is_valid_url(url):
        raise ValidationError("Invalid URL")
    return url


def validate_tiktok_url(url: str) -> str:
    url = (url or "").strip()
    if not _is_valid_url(url):
        raise ValidationError("Invalid TikTok URL")
    host = (urlparse(url).hostname or "").lower()
    if host != "tiktok.com" and not host.endswith(".tiktok.com"):
        raise ValidationError("Invalid TikTok URL")
    return url


def validate_facebook_ad_id(ad_id: str) -> str:
    ad_id = str(ad_id or "").strip()
    if not FACEBOOK_AD_ID_RE.match(ad_id):
        raise ValidationError("Invalid Facebook Ad ID")
    return ad_id


def validate_prompt(prompt: str) -> str:
    prompt = (prompt or "").strip()
    if not prompt:
        raise ValidationError("Prompt must not be empty")
    return prompt
