"""
Pydantic schemas for the image generation provider.
"""
from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ImageCallbackData(BaseModel):
    """``data`` object of an image generation callback."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    state: str | None = None
    task_id: str | None = Field(default=None, alias="taskId")
    result_json: str | dict[str, Any] | None = Field(default=None, alias="resultJson")
    fail_msg: str | None = Field(default=None, alias="failMsg")

    def first_result_url(self) -> str | None:
        """First entry of ``resultJson.resultUrls`` (resultJson arrives as a JSON string)."""
        result = self.result_json
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except ValueError:
                return None
        if not isinstance(result, dict):
            return None
        urls = result.get("resultUrls") or []
        return urls[0] if urls and isinstance(urls[0], str) else None


class ImageCallback(BaseModel):
    """Body posted to /enrichment/image-callback."""

    model_config = ConfigDict(extra="allow")

    code: int | None = None
    msg: str | None = None
    data: ImageCallbackData | None = None

    @property
    def is_success(self) -> bool:
        return self.code == 200 and self.data is not None and self.data.state == "success"

    @property
    def is_failure(self) -> bool:
        return self.code == 501 or (self.data is not None and self.data.state == "fail")

    @property
    def failure_message(self) -> str:
        return (self.data.fail_msg if self.data else None) or self.msg or "Generation failed"


class CreateTaskResponse(BaseModel):
    """Response of the provider's createTask endpoint."""

    model_config = ConfigDict(extra="allow")

    code: int | None = None
    msg: str | None = None
    data: dict[str, Any] | None = None

    @property
    def task_id(self) -> str | None:
        return (self.data or {}).get("taskId")
