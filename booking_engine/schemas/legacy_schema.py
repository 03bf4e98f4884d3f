"""Unstructured booking form data from the pre-qualification-form flow."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class LegacyFormData(BaseModel):
    """Free-form booking fields; only ``topic`` and ``message`` drive scoring."""
    model_config = ConfigDict(extra="allow")

    topic: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.topic or self.message)
