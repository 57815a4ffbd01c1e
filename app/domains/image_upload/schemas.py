from __future__ import annotations

from pydantic import BaseModel


class UploadImageResponse(BaseModel):
    url: str
    filename: str
    size: int
    type: str
    path: str
