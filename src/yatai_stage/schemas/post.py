"""Post-related request schemas."""

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_IMAGES_PER_POST = 4
MAX_TAGS_PER_POST = 10

# Timeline pseudo-tags; a real tag with one of these names could never be selected.
FOLLOWING_TAG_ALIASES = frozenset({"following", "フォロー中"})
LATEST_TAG_ALIASES = frozenset({"latest", "最新"})
RESERVED_TAG_NAMES = FOLLOWING_TAG_ALIASES | LATEST_TAG_ALIASES


def _reject_reserved_tags(names: list[str]) -> list[str]:
    for name in names:
        if name.strip().casefold() in RESERVED_TAG_NAMES:
            raise ValueError(f"tag name {name!r} is reserved")
    return names


class ProductCreate(BaseModel):
    """Listing details submitted together with a post."""

    name: str = Field(..., min_length=1, max_length=200)
    thumbnail_link: str | None = Field(None, description="Thumbnail blob name")
    product_link: str | None = Field(None, description="Deliverable blob name")
    price: int | None = Field(None, ge=0, description="Initial price")
    live_release: bool = False

    @model_validator(mode="after")
    def _check_release_kind(self) -> "ProductCreate":
        if self.live_release:
            if self.price is not None or self.product_link is not None:
                raise ValueError("Live releases have neither a price nor a data file")
        elif self.product_link is None:
            raise ValueError("product_link is required for non-live products")
        return self


class PostCreate(BaseModel):
    """Schema for creating a top-level post."""

    content: str = Field(..., min_length=1, max_length=5000)
    tag_names: list[str] = Field(default_factory=list, max_length=MAX_TAGS_PER_POST)
    image_names: list[str] = Field(
        default_factory=list,
        max_length=MAX_IMAGES_PER_POST,
        description="Blob names in display order",
    )
    live_link: str | None = None
    product: ProductCreate | None = None

    @field_validator("tag_names")
    @classmethod
    def _check_tag_names(cls, names: list[str]) -> list[str]:
        return _reject_reserved_tags(names)


class ReplyCreate(BaseModel):
    """Schema for replying to a post."""

    content: str = Field(..., min_length=1, max_length=5000)
    image_names: list[str] = Field(default_factory=list, max_length=MAX_IMAGES_PER_POST)


class QuoteCreate(BaseModel):
    """Schema for quoting a post."""

    content: str = Field(..., min_length=1, max_length=5000)
    tag_names: list[str] = Field(default_factory=list, max_length=MAX_TAGS_PER_POST)
    image_names: list[str] = Field(default_factory=list, max_length=MAX_IMAGES_PER_POST)

    @field_validator("tag_names")
    @classmethod
    def _check_tag_names(cls, names: list[str]) -> list[str]:
        return _reject_reserved_tags(names)
