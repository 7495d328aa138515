"""
Initial migration for canvas app.
"""
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


def base_fields():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        (
            "organization",
            models.ForeignKey(
                on_delete=django.db.models.deletion.CASCADE,
                related_name="+",
                to="tenants.organization",
            ),
        ),
    ]


def status_fields():
    return [
        (
            "status",
            models.CharField(
                choices=[
                    ("pending", "Pending"),
                    ("processing", "Processing"),
                    ("completed", "Completed"),
                    ("failed", "Failed"),
                ],
                default="pending",
                max_length=20,
            ),
        ),
        ("error", models.TextField(blank=True, null=True)),
    ]


NODE_TYPE_CHOICES = [
    ("text", "Text"),
    ("chat", "Chat"),
    ("youtube", "YouTube"),
    ("tiktok", "TikTok"),
    ("twitter", "Twitter"),
    ("website", "Website"),
    ("facebook_ad", "Facebook Ad"),
    ("image", "Image"),
    ("group", "Group"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenants", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Canvas",
            fields=[
                *base_fields(),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="canvases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "canvas_canvas",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="CanvasNode",
            fields=[
                *base_fields(),
                ("node_type", models.CharField(choices=NODE_TYPE_CHOICES, max_length=20)),
                ("position_x", models.FloatField(default=0)),
                ("position_y", models.FloatField(default=0)),
                ("width", models.FloatField(blank=True, null=True)),
                ("height", models.FloatField(blank=True, null=True)),
                (
                    "payload_id",
                    models.UUIDField(help_text="Id of the typed payload row in the table selected by node_type"),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "canvas",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nodes",
                        to="canvas.canvas",
                    ),
                ),
                (
                    "parent_group",
                    models.ForeignKey(
                        blank=True,
                        help_text="Group node owning this node; owned nodes are not top-level",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to="canvas.canvasnode",
                    ),
                ),
            ],
            options={
                "db_table": "canvas_node",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="CanvasEdge",
            fields=[
                *base_fields(),
                ("source_handle", models.CharField(blank=True, max_length=100, null=True)),
                ("target_handle", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "canvas",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="edges",
                        to="canvas.canvas",
                    ),
                ),
                (
                    "source",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="outgoing_edges",
                        to="canvas.canvasnode",
                    ),
                ),
                (
                    "target",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="incoming_edges",
                        to="canvas.canvasnode",
                    ),
                ),
            ],
            options={
                "db_table": "canvas_edge",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="Thread",
            fields=[
                *base_fields(),
                ("agent_thread_id", models.CharField(max_length=255)),
                ("title", models.CharField(max_length=255)),
                (
                    "canvas",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="threads",
                        to="canvas.canvas",
                    ),
                ),
            ],
            options={
                "db_table": "canvas_thread",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="TextNode",
            fields=[
                *base_fields(),
                ("content", models.TextField(blank=True, default="")),
            ],
            options={"db_table": "canvas_text_node"},
        ),
        migrations.CreateModel(
            name="ChatNode",
            fields=[
                *base_fields(),
                (
                    "canvas",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_nodes",
                        to="canvas.canvas",
                    ),
                ),
                (
                    "selected_thread",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="chat_nodes",
                        to="canvas.thread",
                    ),
                ),
            ],
            options={"db_table": "canvas_chat_node"},
        ),
        migrations.CreateModel(
            name="YoutubeNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("url", models.URLField(max_length=2048)),
                ("video_id", models.CharField(max_length=64)),
                ("title", models.CharField(blank=True, max_length=500, null=True)),
                ("thumbnail_url", models.URLField(blank=True, max_length=2048, null=True)),
                ("transcript", models.TextField(blank=True, null=True)),
            ],
            options={"db_table": "canvas_youtube_node"},
        ),
        migrations.CreateModel(
            name="TikTokNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("url", models.URLField(max_length=2048)),
                ("video_id", models.CharField(blank=True, max_length=64, null=True)),
                ("title", models.TextField(blank=True, null=True)),
                ("author", models.CharField(blank=True, max_length=255, null=True)),
                ("transcript", models.TextField(blank=True, null=True)),
            ],
            options={"db_table": "canvas_tiktok_node"},
        ),
        migrations.CreateModel(
            name="TwitterNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("url", models.URLField(max_length=2048)),
                ("tweet_id", models.CharField(max_length=64)),
                ("full_text", models.TextField(blank=True, null=True)),
                ("author_name", models.CharField(blank=True, max_length=255, null=True)),
                ("author_username", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={"db_table": "canvas_twitter_node"},
        ),
        migrations.CreateModel(
            name="WebsiteNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("url", models.URLField(max_length=2048)),
                ("title", models.CharField(blank=True, max_length=500, null=True)),
                ("markdown", models.TextField(blank=True, null=True)),
                ("screenshot_ref", models.CharField(blank=True, max_length=500, null=True)),
            ],
            options={"db_table": "canvas_website_node"},
        ),
        migrations.CreateModel(
            name="FacebookAdNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("ad_id", models.CharField(max_length=64)),
                ("ad_archive_id", models.CharField(blank=True, max_length=64, null=True)),
                ("url", models.URLField(blank=True, max_length=2048, null=True)),
                ("title", models.TextField(blank=True, null=True)),
                ("body", models.TextField(blank=True, null=True)),
                ("link_description", models.TextField(blank=True, null=True)),
                ("page_name", models.CharField(blank=True, max_length=255, null=True)),
                ("publisher_platform", models.JSONField(blank=True, default=list)),
                (
                    "media_type",
                    models.CharField(
                        blank=True,
                        choices=[("video", "Video"), ("image", "Image"), ("none", "None")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("image_refs", models.JSONField(blank=True, default=list)),
                ("video_url", models.URLField(blank=True, max_length=2048, null=True)),
                ("video_thumbnail_ref", models.CharField(blank=True, max_length=500, null=True)),
                ("transcript", models.TextField(blank=True, null=True)),
            ],
            options={"db_table": "canvas_facebook_ad_node"},
        ),
        migrations.CreateModel(
            name="ImageNode",
            fields=[
                *base_fields(),
                *status_fields(),
                ("prompt", models.TextField()),
                ("is_ai_generated", models.BooleanField(default=True)),
                ("image_ref", models.CharField(blank=True, max_length=500, null=True)),
                ("provider_task_id", models.CharField(blank=True, max_length=255, null=True)),
                ("width", models.PositiveIntegerField(blank=True, null=True)),
                ("height", models.PositiveIntegerField(blank=True, null=True)),
            ],
            options={"db_table": "canvas_image_node"},
        ),
        migrations.CreateModel(
            name="GroupNode",
            fields=[
                *base_fields(),
                ("title", models.CharField(default="New Group", max_length=255)),
                ("color", models.CharField(default="rgba(100, 100, 255, 0.1)", max_length=64)),
            ],
            options={"db_table": "canvas_group_node"},
        ),
        migrations.AddIndex(
            model_name="canvas",
            index=models.Index(fields=["organization", "-updated_at"], name="canvas_org_updated_idx"),
        ),
        migrations.AddIndex(
            model_name="canvasnode",
            index=models.Index(fields=["canvas", "node_type"], name="canvas_node_type_idx"),
        ),
        migrations.AddIndex(
            model_name="canvasnode",
            index=models.Index(fields=["payload_id"], name="canvas_node_payload_idx"),
        ),
        migrations.AddIndex(
            model_name="canvasedge",
            index=models.Index(fields=["canvas"], name="canvas_edge_canvas_idx"),
        ),
        migrations.AddIndex(
            model_name="canvasedge",
            index=models.Index(fields=["target", "created_at"], name="canvas_edge_target_idx"),
        ),
    ]
