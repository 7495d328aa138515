"""
Views for enrichment app.
"""
from __future__ import annotations

import uuid

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.enrichment.webhooks import handle_image_callback
from libs.logging.context import set_context_ids


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def image_callback(request):
    """
    Image generation provider callback.

    POST /enrichment/image-callback?nodeId=<image node id>
    """
    node_id = request.query_params.get("nodeId")
    if not node_id:
        return Response({"error": "Missing nodeId parameter"}, status=status.HTTP_400_BAD_REQUEST)
    try:
        node_id = uuid.UUID(node_id)
    except ValueError:
        return Response({"error": "Invalid nodeId parameter"}, status=status.HTTP_400_BAD_REQUEST)

    set_context_ids(node_id=str(node_id))
    outcome = handle_image_callback(node_id, request.data)
    return Response({"message": outcome.message}, status=outcome.status_code)
