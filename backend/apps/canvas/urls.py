"""
URLs for canvas app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.canvas.views import CanvasEdgeViewSet, CanvasNodeViewSet, CanvasViewSet, run_tool

router = DefaultRouter()
router.register(r"canvases", CanvasViewSet, basename="canvas")
router.register(r"canvases/(?P<canvas_id>[^/.]+)/nodes", CanvasNodeViewSet, basename="canvas-node")
router.register(r"canvases/(?P<canvas_id>[^/.]+)/edges", CanvasEdgeViewSet, basename="canvas-edge")

urlpatterns = [
    path("orgs/<uuid:org_id>/canvases/<uuid:canvas_id>/tools/<str:tool_name>/", run_tool, name="canvas-tool"),
    path("orgs/<uuid:org_id>/", include(router.urls)),
]
