"""
News Data Models

Pydantic models for the payloads served by the Kite API: the category index
and the per-category article clusters. Unknown fields are kept so that a
validated payload never loses data the API adds later.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to a plain dictionary."""
        return self.model_dump()


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _none_to_str(value: Any) -> Any:
    return "" if value is None else value


def _truncate_timestamp(value: Any) -> Any:
    """Accept fractional epoch seconds (numbers or numeric strings) by truncating them."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return value
    return value


class Category(_WireModel):
    """One topic channel listed in the index."""
    file: str = Field(..., description="Stable identifier, also the relative article cache key")
    name: str = Field("", description="Display label")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return self.file[:-len(".json")] if self.file.endswith(".json") else self.file


class CategoryIndex(_WireModel):
    """The category index, fetched and stored wholesale."""
    timestamp: int = Field(..., description="Epoch seconds of the news cycle")
    categories: List[Category] = Field(default_factory=list)
    supported_languages: Optional[List[str]] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def truncate_timestamp(cls, value: Any) -> Any:
        return _truncate_timestamp(value)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_null_lists(cls, value: Any) -> Any:
        return _none_to_list(value)

    def category_files(self) -> List[str]:
        return [category.file for category in self.categories]

    def get_category(self, file: str) -> Optional[Category]:
        for category in self.categories:
            if category.file == file:
                return category
        return None


class ImageRef(_WireModel):
    url: str = ""
    caption: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)


class SourceRef(_WireModel):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)


class Perspective(_WireModel):
    sources: List[SourceRef] = Field(default_factory=list)
    text: str = ""

    @field_validator("sources", mode="before")
    @classmethod
    def coerce_null_lists(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("text", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)


class TimelineEvent(_WireModel):
    date: str = ""
    content: str = ""

    @field_validator("date", "content", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)


class DomainRef(_WireModel):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)


class ArticleCluster(_WireModel):
    """
    One AI-summarized story.

    Bundles a title, summary, talking points, the perspectives of several
    sources, a timeline and up to two images.
    """
    category: Optional[str] = None
    title: str = ""
    short_summary: str = ""
    talking_points: List[str] = Field(default_factory=list)
    perspectives: List[Perspective] = Field(default_factory=list)
    timeline: List[TimelineEvent] = Field(default_factory=list)
    domains: List[DomainRef] = Field(default_factory=list)
    primary_image: Optional[ImageRef] = None
    secondary_image: Optional[ImageRef] = None

    @field_validator(
        "talking_points", "perspectives", "timeline", "domains", mode="before"
    )
    @classmethod
    def coerce_null_lists(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("title", "short_summary", mode="before")
    @classmethod
    def coerce_null_strings(cls, value: Any) -> Any:
        return _none_to_str(value)

    def image_refs(self) -> List[Tuple[str, ImageRef]]:
        """Return (label, image) pairs for the images that carry a URL."""
        refs = []
        for label, image in (("primary", self.primary_image), ("secondary", self.secondary_image)):
            if image is not None and image.url:
                refs.append((label, image))
        return refs


class CategoryArticles(_WireModel):
    """A category's article response: its clusters plus the news cycle timestamp."""
    category: Optional[str] = None
    timestamp: Optional[int] = None
    clusters: List[ArticleCluster] = Field(default_factory=list)

    @field_validator("timestamp", mode="before")
    @classmethod
    def truncate_timestamp(cls, value: Any) -> Any:
        return _truncate_timestamp(value)

    @field_validator("clusters", mode="before")
    @classmethod
    def coerce_null_lists(cls, value: Any) -> Any:
        return _none_to_list(value)
