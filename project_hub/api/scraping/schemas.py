"""Pydantic request schemas for the scraping API."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class ScrapeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source: Optional[Literal["all", "github", "kaggle", "hackathon", "upwork"]] = None
