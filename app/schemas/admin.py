from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LogoResponse(BaseModel):
    logo_url: str = Field(serialization_alias="logoUrl")

    model_config = ConfigDict(populate_by_name=True)


class LogoUploadResponse(LogoResponse):
    ok: bool = True
