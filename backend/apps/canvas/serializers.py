"""
Serializers for canvas app.
"""
from __future__ import annotations

from rest_framework import serializers

from apps.canvas.models import (
    Canvas,
    CanvasEdge,
    CanvasNode,
    ChatNode,
    FacebookAdNode,
    GroupNode,
    ImageNode,
    NodeType,
    TextNode,
    Thread,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)
from libs.blobstore import get_blobstore

_PAYLOAD_BASE_FIELDS = ["id", "created_at", "updated_at"]
_ENRICHED_FIELDS = [*_PAYLOAD_BASE_FIELDS, "status", "error"]


class CanvasSerializer(serializers.ModelSerializer):
    """Serializer for Canvas."""

    created_by = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Canvas
        fields = ["id", "organization", "title", "description", "created_by", "created_at", "updated_at"]
        read_only_fields = ["id", "organization", "created_by", "created_at", "updated_at"]


class CanvasWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class ThreadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Thread
        fields = ["id", "canvas", "agent_thread_id", "title", "created_at", "updated_at"]
        read_only_fields = fields


# Typed payloads


class TextNodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TextNode
        fields = [*_PAYLOAD_BASE_FIELDS, "content"]


class ChatNodeSerializer(serializers.ModelSerializer):
    selected_thread = ThreadSerializer(read_only=True)

    class Meta:
        model = ChatNode
        fields = [*_PAYLOAD_BASE_FIELDS, "canvas", "selected_thread"]


class YoutubeNodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = YoutubeNode
        fields = [*_ENRICHED_FIELDS, "url", "video_id", "title", "thumbnail_url", "transcript"]


class TikTokNodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TikTokNode
        fields = [*_ENRICHED_FIELDS, "url", "video_id", "title", "author", "transcript"]


class TwitterNodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TwitterNode
        fields = [*_ENRICHED_FIELDS, "url", "tweet_id", "full_text", "author_name", "author_username"]


class WebsiteNodeSerializer(serializers.ModelSerializer):
    screenshot_url = serializers.SerializerMethodField()

    class Meta:
        model = WebsiteNode
        fields = [*_ENRICHED_FIELDS, "url", "title", "markdown", "screenshot_url"]

    def get_screenshot_url(self, obj: WebsiteNode) -> str | None:
        return get_blobstore().get_url(obj.screenshot_ref) if obj.screenshot_ref else None


class FacebookAdNodeSerializer(serializers.ModelSerializer):
    image_urls = serializers.SerializerMethodField()
    video_thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = FacebookAdNode
        fields = [
            *_ENRICHED_FIELDS,
            "ad_id",
            "ad_archive_id",
            "url",
            "title",
            "body",
            "link_description",
            "page_name",
            "publisher_platform",
            "media_type",
            "image_urls",
            "video_url",
            "video_thumbnail_url",
            "transcript",
        ]

    def get_image_urls(self, obj: FacebookAdNode) -> list[str]:
        store = get_blobstore()
        return [url for url in (store.get_url(ref) for ref in obj.image_refs or []) if url]

    def get_video_thumbnail_url(self, obj: FacebookAdNode) -> str | None:
        return get_blobstore().get_url(obj.video_thumbnail_ref) if obj.video_thumbnail_ref else None


class ImageNodeSerializer(serializers.ModelSerializer):
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = ImageNode
        fields = [
            *_ENRICHED_FIELDS,
            "prompt",
            "is_ai_generated",
            "image_url",
            "provider_task_id",
            "width",
            "height",
        ]

    def get_image_url(self, obj: ImageNode) -> str | None:
        return get_blobstore().get_url(obj.image_ref) if obj.image_ref else None


class GroupNodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = GroupNode
        fields = [*_PAYLOAD_BASE_FIELDS, "title", "color"]


PAYLOAD_SERIALIZERS = {
    NodeType.TEXT: TextNodeSerializer,
    NodeType.CHAT: ChatNodeSerializer,
    NodeType.YOUTUBE: YoutubeNodeSerializer,
    NodeType.TIKTOK: TikTokNodeSerializer,
    NodeType.TWITTER: TwitterNodeSerializer,
    NodeType.WEBSITE: WebsiteNodeSerializer,
    NodeType.FACEBOOK_AD: FacebookAdNodeSerializer,
    NodeType.IMAGE: ImageNodeSerializer,
    NodeType.GROUP: GroupNodeSerializer,
}


def serialize_payload(node_type: str, payload) -> dict | None:
    if payload is None:
        return None
    return PAYLOAD_SERIALIZERS[node_type](payload).data


class CanvasNodeSerializer(serializers.ModelSerializer):
    """
    CanvasNode with its typed payload inlined.

    Pass ``payloads`` (payload_id -> payload) in the context to avoid one
    query per node.
    """

    position = serializers.SerializerMethodField()
    data = serializers.SerializerMethodField()
    payload = serializers.SerializerMethodField()

    class Meta:
        model = CanvasNode
        fields = [
            "id",
            "canvas",
            "node_type",
            "position",
            "width",
            "height",
            "data",
            "parent_group",
            "notes",
            "payload",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_position(self, obj: CanvasNode) -> dict[str, float]:
        return obj.position

    def get_data(self, obj: CanvasNode) -> dict[str, str]:
        return {"node_id": str(obj.payload_id)}

    def get_payload(self, obj: CanvasNode) -> dict | None:
        payloads = self.context.get("payloads")
        payload = payloads.get(obj.payload_id) if payloads is not None else obj.get_payload()
        return serialize_payload(obj.node_type, payload)


class CanvasEdgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = CanvasEdge
        fields = ["id", "canvas", "source", "target", "source_handle", "target_handle", "created_at"]
        read_only_fields = fields


# Request bodies


class PositionSerializer(serializers.Serializer):
    x = serializers.FloatField()
    y = serializers.FloatField()


class NodeCreateSerializer(serializers.Serializer):
    """Create any node type; type-specific fields are validated by the services."""

    node_type = serializers.ChoiceField(choices=NodeType.choices)
    position = PositionSerializer()
    width = serializers.FloatField(required=False, min_value=1)
    height = serializers.FloatField(required=False, min_value=1)
    content = serializers.CharField(required=False, allow_blank=True)
    url = serializers.CharField(required=False)
    ad_id = serializers.CharField(required=False)
    prompt = serializers.CharField(required=False)
    title = serializers.CharField(required=False, max_length=255)
    color = serializers.CharField(required=False, max_length=64)

    ARG_FIELDS = ("content", "url", "ad_id", "prompt", "title", "color")

    def type_args(self) -> dict:
        return {k: v for k, v in self.validated_data.items() if k in self.ARG_FIELDS}


class ResizeSerializer(serializers.Serializer):
    width = serializers.FloatField(min_value=1)
    height = serializers.FloatField(min_value=1)


class NotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class TextContentSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True)


class GroupUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, max_length=255)
    color = serializers.CharField(required=False, max_length=64)


class MembershipSerializer(serializers.Serializer):
    group_id = serializers.UUIDField()


class SelectThreadSerializer(serializers.Serializer):
    thread_id = serializers.UUIDField()


class ThreadCreateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, max_length=255)


class EdgeCreateSerializer(serializers.Serializer):
    source = serializers.UUIDField()
    target = serializers.UUIDField()
    source_handle = serializers.CharField(required=False, allow_null=True, max_length=100)
    target_handle = serializers.CharField(required=False, allow_null=True, max_length=100)
