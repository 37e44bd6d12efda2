"""
Pydantic models for the Product Hunt GraphQL ``viewer`` query.

Validating through these models turns a missing or null field anywhere in the
nested payload into a ``ValidationError`` whose locations name the field.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VIEWER_QUERY = """
query {
  viewer {
    user {
      id
      name
      username
      profileImage
    }
  }
}
""".strip()


class ProductHuntUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    username: str = Field(..., min_length=1)
    profile_image: Optional[str] = Field(None, alias="profileImage")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ProductHuntViewer(BaseModel):
    user: ProductHuntUser


class ProductHuntViewerData(BaseModel):
    viewer: ProductHuntViewer


class ProductHuntViewerResponse(BaseModel):
    """Top-level GraphQL envelope for ``VIEWER_QUERY``."""

    data: ProductHuntViewerData


__all__ = [
    "ProductHuntUser",
    "ProductHuntViewer",
    "ProductHuntViewerData",
    "ProductHuntViewerResponse",
    "VIEWER_QUERY",
]
