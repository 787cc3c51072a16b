import os
from typing import List
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _parse_ids(raw: str) -> List[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


class EngineSettings(BaseModel):
    """Runtime knobs of the contract engine, read from the environment."""
    env: str = Field(default_factory=lambda: os.getenv("ENV", "development"))
    go_live_offset_days: int = Field(
        default_factory=lambda: int(os.getenv("GO_LIVE_OFFSET_DAYS", "15")), ge=0)
    max_open_ended_occurrences: int = Field(
        default_factory=lambda: int(os.getenv("MAX_OPEN_ENDED_OCCURRENCES", "12")), ge=1)
    # Users notified when a commission request is created
    commission_approver_ids: List[int] = Field(
        default_factory=lambda: _parse_ids(os.getenv("COMMISSION_APPROVER_IDS", "")))

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def get_settings() -> EngineSettings:
    return EngineSettings()
