from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ParticleType(str, Enum):
    NONE = "none"
    FIRE = "fire"
    SPARKS = "sparks"
    SNOW = "snow"
    RAIN = "rain"
    DIGITAL = "digital"
    BUBBLES = "bubbles"


class LayoutType(str, Enum):
    GRID = "grid"
    COMPACT = "compact"
    LIST = "list"


class RosterStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"


class HubModel(BaseModel):
    # camelCase on the wire, snake_case in Python; snapshots are never mutated
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LinkEntry(HubModel):
    id: str
    title: str
    url: str
    description: str = ""
    category: str = "General"
    icon: str = "Link"
    order: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # older documents stored numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ThemeSettings(HubModel):
    id: str
    name: str
    background: str
    accent: str
    secondary: Optional[str] = None
    card_opacity: float = Field(default=0.12, ge=0.0, le=1.0)
    particles: ParticleType = ParticleType.NONE
    background_image: Optional[str] = None
    is_fixed: bool = False
    blur_amount: Optional[int] = Field(default=None, ge=0)


class AppConfig(HubModel):
    title: str = "LinkHub Pro"
    subtitle: str = "Integrated Command Terminal"
    version: str = "3.3.0"
    credits: str = "Built by Intelligence Unit"
    endpoint_url: str = Field(default="", alias="gasUrl")
    show_icons: bool = True
    show_descriptions: bool = True
    show_categories: bool = True
    show_search: bool = True
    show_previews: bool = True
    admin_password: str = Field(default="", alias="adminPasswordHash")


class AppState(HubModel):
    links: List[LinkEntry] = Field(default_factory=list)
    theme: ThemeSettings
    config: AppConfig = Field(default_factory=AppConfig)
    layout: LayoutType = LayoutType.GRID

    def to_document(self) -> dict:
        """The exact shape stored remotely under ``data``."""
        return {
            "links": [link.to_wire() for link in self.links],
            "theme": self.theme.to_wire(),
            "config": self.config.to_wire(),
            "layout": self.layout.value,
        }


class LinkMetadata(BaseModel):
    description: str
    category: str
    icon: str
