"""
Enrichment workers: one state machine, five instantiations.

Each job is bound to one typed payload id and runs once:
load -> processing -> fetch -> completed | failed. Errors are caught at the
job boundary and stored on the node; nothing is retried. Image generation
only dispatches; the webhook finalizes it.
"""
from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.urls import reverse

from apps.canvas.models import (
    EnrichmentStatus,
    FacebookAdNode,
    ImageNode,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)
from apps.enrichment import providers
from apps.enrichment.extract import dig, first_non_empty, normalize_transcript
from apps.enrichment.status import EnrichmentResult, finalize
from libs.blobstore import get_blobstore
from libs.common.errors import ProviderError, StorageError

logger = logging.getLogger(__name__)

MAX_AD_IMAGES = 5


def store_remote_blob(url: str, *, prefix: str) -> str:
    """Download ``url`` and put it in the blob store; returns the blob reference."""
    content, content_type = providers.download(url)
    return get_blobstore().store(content, content_type=content_type, prefix=prefix)


class EnrichmentWorker:
    """Shared job shape; subclasses implement ``fetch``."""

    model: Any = None
    # Shown instead of raw "API request failed: ..." messages
    failure_hint: str | None = None
    claims_processing = True

    def run(self, node_id) -> None:
        name = self.model.__name__
        node = self.model.objects.filter(id=node_id).first()
        if node is None:
            logger.error(f"{name} {node_id} not found; aborting enrichment", extra={"node_id": str(node_id)})
            return
        if node.status != EnrichmentStatus.PENDING:
            logger.warning(
                f"{name} {node_id} is already {node.status}; skipping enrichment",
                extra={"node_id": str(node_id)},
            )
            return
        if self.claims_processing and not finalize(self.model, node_id, EnrichmentResult.processing()):
            return

        logger.info(f"Enriching {name} {node_id}", extra={"node_id": str(node_id)})
        try:
            result = self.fetch(node)
        except Exception as e:
            logger.error(f"Enrichment of {name} {node_id} failed: {e}", exc_info=True, extra={"node_id": str(node_id)})
            finalize(self.model, node_id, EnrichmentResult.failed(self.error_message(e)))
            return
        finalize(self.model, node_id, result)

    def fetch(self, node) -> EnrichmentResult:
        raise NotImplementedError

    def error_message(self, exc: Exception) -> str:
        message = str(exc) or "Unknown error occurred"
        if self.failure_hint and message.startswith("API request failed"):
            return f"API request failed. Please check your API key and {self.failure_hint}."
        return message


class YoutubeTranscriptWorker(EnrichmentWorker):
    model = YoutubeNode

    def fetch(self, node: YoutubeNode) -> EnrichmentResult:
        data = providers.fetch_youtube_transcript(node.url)
        content = data.get("content") if isinstance(data, dict) else None
        if isinstance(content, list):
            content = " ".join(chunk.get("text", "") for chunk in content if isinstance(chunk, dict))
        transcript = (content or "").strip()
        if not transcript:
            raise ProviderError("Transcript not available")

        title = None
        try:
            title = first_non_empty(providers.fetch_youtube_metadata(node.video_id), "title")
        except ProviderError as e:
            logger.warning(f"Could not fetch YouTube metadata for {node.video_id}: {e}")

        return EnrichmentResult.completed(
            transcript=transcript,
            title=title or f"YouTube Video {node.video_id}",
        )


class TikTokWorker(EnrichmentWorker):
    model = TikTokNode
    failure_hint = "video URL"

    def fetch(self, node: TikTokNode) -> EnrichmentResult:
        data = providers.fetch_tiktok_video(node.url)
        if data.get("success") is False:
            raise ProviderError("API request was not successful")
        aweme = data.get("aweme_detail")
        if not aweme:
            raise ProviderError("Invalid API response: missing aweme_detail")

        return EnrichmentResult.completed(
            title=first_non_empty(aweme, "desc", default="TikTok Video"),
            author=first_non_empty(aweme, "author.nickname", "author.unique_id", default="Unknown"),
            video_id=str(aweme["aweme_id"]) if aweme.get("aweme_id") else None,
            transcript=normalize_transcript(first_non_empty(data, "transcript_only_text", "transcript")),
        )


class TweetWorker(EnrichmentWorker):
    model = TwitterNode
    failure_hint = "tweet URL"

    def fetch(self, node: TwitterNode) -> EnrichmentResult:
        data = providers.fetch_tweet(node.url)
        if data.get("success") is False:
            raise ProviderError("API request was not successful")
        full_text = first_non_empty(data, "legacy.full_text", "note_tweet.note_tweet_results.result.text")
        if not full_text:
            raise ProviderError("Tweet text not available")

        return EnrichmentResult.completed(
            full_text=full_text,
            author_name=dig(data, "core.user_results.result.legacy.name"),
            author_username=dig(data, "core.user_results.result.legacy.screen_name"),
        )


class WebsiteWorker(EnrichmentWorker):
    model = WebsiteNode

    def fetch(self, node: WebsiteNode) -> EnrichmentResult:
        data = providers.scrape_website(node.url)
        if data.get("success") is False:
            raise ProviderError(data.get("error") or "Scrape was not successful")

        fields = {
            "markdown": first_non_empty(data, "data.markdown", "markdown", default=""),
            "title": first_non_empty(data, "data.metadata.title", "metadata.title", default=node.url),
        }
        screenshot_url = first_non_empty(data, "data.actions.screenshots.0", "actions.screenshots.0")
        if screenshot_url:
            try:
                fields["screenshot_ref"] = store_remote_blob(screenshot_url, prefix="screenshots")
            except (ProviderError, StorageError) as e:
                logger.warning(f"Failed to store screenshot for {node.url}: {e}", extra={"node_id": str(node.id)})
        return EnrichmentResult.completed(**fields)


class FacebookAdWorker(EnrichmentWorker):
    model = FacebookAdNode
    failure_hint = "Ad ID"

    def fetch(self, node: FacebookAdNode) -> EnrichmentResult:
        data = providers.fetch_facebook_ad(node.ad_id)
        if data.get("success") is False:
            raise ProviderError("API request was not successful")
        snapshot = data.get("snapshot")
        if not snapshot:
            raise ProviderError("Invalid API response: missing snapshot")

        body = snapshot.get("body")
        if isinstance(body, dict):
            body = body.get("text")
        ad_archive_id = str(data.get("adArchiveID") or node.ad_id)
        fields: dict[str, Any] = {
            "title": first_non_empty(data, "snapshot.cards.0.title", "snapshot.title", "pageName", default="Facebook Ad"),
            "body": body or "",
            "link_description": snapshot.get("link_description") or "",
            "page_name": first_non_empty(data, "pageName", "snapshot.page_name", default="Unknown Page"),
            "publisher_platform": data.get("publisherPlatform") or [],
            "ad_archive_id": ad_archive_id,
            "url": data.get("url") or f"https://www.facebook.com/ads/library?id={ad_archive_id}",
            "media_type": "none",
        }
        fields.update(self._media_fields(node, snapshot))
        return EnrichmentResult.completed(**fields)

    def _media_fields(self, node: FacebookAdNode, snapshot: dict[str, Any]) -> dict[str, Any]:
        """Videos take priority over images; individual download failures are only logged."""
        videos = snapshot.get("videos") or []
        images = snapshot.get("images") or []

        if videos:
            video = videos[0]
            fields: dict[str, Any] = {
                "media_type": "video",
                "video_url": video.get("video_hd_url") or video.get("video_sd_url"),
            }
            if isinstance(video.get("transcript"), str) and video["transcript"]:
                fields["transcript"] = video["transcript"]
            preview = video.get("video_preview_image_url")
            if preview:
                try:
                    fields["video_thumbnail_ref"] = store_remote_blob(preview, prefix="ads")
                except (ProviderError, StorageError) as e:
                    logger.warning(f"Failed to store video thumbnail for ad {node.ad_id}: {e}")
            return fields

        if images:
            refs = []
            for image in images[:MAX_AD_IMAGES]:
                image_url = image.get("resized_image_url") or image.get("original_image_url")
                if not image_url:
                    continue
                try:
                    refs.append(store_remote_blob(image_url, prefix="ads"))
                except (ProviderError, StorageError) as e:
                    logger.warning(f"Failed to store image for ad {node.ad_id}: {e}")
            return {"media_type": "image", "image_refs": refs}

        return {}


class ImageGenerationWorker(EnrichmentWorker):
    """
    Dispatch only: the provider calls back on the webhook when done.

    The node moves pending -> processing together with the provider task id,
    so a callback that wins the race simply finds a terminal node.
    """

    model = ImageNode
    claims_processing = False

    def fetch(self, node: ImageNode) -> EnrichmentResult:
        task_id = providers.create_image_task(node.prompt, image_callback_url(node.id))
        return EnrichmentResult.processing(provider_task_id=task_id)


def image_callback_url(image_node_id) -> str:
    base_url = getattr(settings, "ENRICHMENT_CALLBACK_BASE_URL", "").rstrip("/")
    return f"{base_url}{reverse('enrichment:image-callback')}?nodeId={image_node_id}"


# Job entry points (referenced by dotted path from the node type registry)


def fetch_youtube_transcript(youtube_node_id) -> None:
    YoutubeTranscriptWorker().run(youtube_node_id)


def fetch_tiktok_video(tiktok_node_id) -> None:
    TikTokWorker().run(tiktok_node_id)


def fetch_tweet(twitter_node_id) -> None:
    TweetWorker().run(twitter_node_id)


def scrape_website(website_node_id) -> None:
    WebsiteWorker().run(website_node_id)


def fetch_facebook_ad(facebook_ad_node_id) -> None:
    FacebookAdWorker().run(facebook_ad_node_id)


def dispatch_image_generation(image_node_id) -> None:
    ImageGenerationWorker().run(image_node_id)
