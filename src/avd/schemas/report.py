"""The JSON document written into every report bundle."""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from avd.schemas.elements import ColorPalette, TypographyStyle, UIElement, VisualAudit

GENERATOR = "ai-vision-debug"


class ReportData(BaseModel):
    """Cached analysis plus derived palette, typography and contrast data."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    url: str
    screenshot: str | None = None
    description: str
    color_palette: ColorPalette = ColorPalette()
    typography_system: list[TypographyStyle] = []
    visual_audit: VisualAudit | None = None
    element_count: int = 0
    elements: list[UIElement] = []
    generator: str = GENERATOR

    def to_json(self) -> str:
        """Serialize with camelCase keys, dropping absent optional fields.

        ``contrastRatio`` is kept on every element (``null`` when it could
        not be computed).
        """
        data = self.model_dump(by_alias=True, exclude_none=True)
        for raw, element in zip(data.get("elements", []), self.elements):
            raw["contrastRatio"] = element.contrast_ratio
        # Audit metrics keep explicit nulls for missing assessment/details
        if self.visual_audit is not None:
            data["visualAudit"] = self.visual_audit.model_dump()
        return json.dumps(data, indent=2)
