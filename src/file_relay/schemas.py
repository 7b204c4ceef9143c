####################################
# --- Request/response schemas --- #
####################################

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from file_relay.models import UploadResult


class UploadedFile(BaseModel):
    """A stored file as reported to the client."""
    name: str = Field(
        description="Generated filename under which the file is stored.",
        json_schema_extra={"example": "3f2b8c1e-9a4d-4c8e-b1f2-0d6e7a5c9b21.jpg"},
    )
    url: str = Field(description="Public URL serving the file.")
    mime: str = Field(description="The MIME type of the file.")
    size: int = Field(description="The size of the file in bytes.")
    original_name: str = Field(
        alias="originalName",
        description="The filename supplied by the client, or derived from the source URL.",
    )

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_result(cls, result: UploadResult) -> "UploadedFile":
        return cls(
            name=result.name,
            url=result.url,
            mime=result.mime,
            size=result.size,
            original_name=result.original_name,
        )


class UploadResponse(BaseModel):
    """Response model for `POST /api/upload`."""
    success: bool = True
    files: List[UploadedFile]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "files": [
                    {
                        "name": "3f2b8c1e-9a4d-4c8e-b1f2-0d6e7a5c9b21.jpg",
                        "url": "https://relay.example.com/files/3f2b8c1e-9a4d-4c8e-b1f2-0d6e7a5c9b21.jpg",
                        "mime": "image/jpeg",
                        "size": 284392,
                        "originalName": "photo.jpg",
                    }
                ],
            }
        }
    )


class UploadErrorResponse(BaseModel):
    """Error envelope for `POST /api/upload`."""
    success: bool = False
    error: str


class FileNotFoundResponse(BaseModel):
    """Response model for an unknown `GET /files/:filename`."""
    error: str


class HealthResponse(BaseModel):
    """Response model for `GET /health`."""
    status: str
    app_name: str
    remote_store: str
    remote_store_configured: bool
    cache: Dict[str, int]
    stored_by_tier: Dict[str, int]
