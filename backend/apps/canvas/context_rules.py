"""
Context extraction rules: one text block per typed payload.

A rule returns None when its extracted field is empty; status checks and
notes are handled by the aggregator.
"""
from __future__ import annotations

from apps.canvas.models import (
    FacebookAdNode,
    GroupNode,
    TextNode,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)


def text_context(node: TextNode) -> str | None:
    if not node.content:
        return None
    return f"Context from connected text node:\n{node.content}"


def youtube_context(node: YoutubeNode) -> str | None:
    if not node.transcript:
        return None
    title = node.title or f"YouTube Video {node.video_id}"
    return f"YouTube Video: {title}\nURL: {node.url}\n\nTranscript:\n{node.transcript}"


def website_context(node: WebsiteNode) -> str | None:
    if not node.markdown:
        return None
    title = node.title or node.url
    return f"Website: {title}\nURL: {node.url}\n\nContent:\n{node.markdown}"


def tiktok_context(node: TikTokNode) -> str | None:
    if not node.transcript:
        return None
    title = node.title or "TikTok Video"
    author = f" by @{node.author}" if node.author else ""
    return f"TikTok Video: {title}{author}\nURL: {node.url}\n\nTranscript:\n{node.transcript}"


def twitter_context(node: TwitterNode) -> str | None:
    if not node.full_text:
        return None
    author = f" by @{node.author_username}" if node.author_username else ""
    return f"Tweet{author}\nURL: {node.url}\n\nContent:\n{node.full_text}"


def facebook_ad_context(node: FacebookAdNode) -> str | None:
    if not (node.body or node.link_description or node.transcript):
        return None

    title = node.title or f"Facebook Ad {node.ad_id}"
    page_name = f" by {node.page_name}" if node.page_name else ""
    lines = [f"Facebook Ad: {title}{page_name}"]
    if node.url:
        lines.append(f"URL: {node.url}")
    if node.media_type:
        lines.append(f"Media Type: {node.media_type}")
    if node.publisher_platform:
        lines.append(f"Platforms: {', '.join(node.publisher_platform)}")
    content = "\n".join(lines) + "\n\n"
    if node.body:
        content += f"Ad Body:\n{node.body}\n\n"
    if node.link_description:
        content += f"Link Description:\n{node.link_description}\n\n"
    if node.transcript:
        content += f"Video Transcript:\n{node.transcript}\n"
    return content.strip()


def group_header(node: GroupNode, child_count: int) -> str:
    return f"--- Group: {node.title} ({child_count} items) ---"


def group_footer(node: GroupNode) -> str:
    return f"--- End of Group: {node.title} ---"
