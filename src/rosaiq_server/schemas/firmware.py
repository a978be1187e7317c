"""
Pydantic schemas for firmware catalog endpoints.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .common import UtcDatetime


class FirmwareOut(BaseModel):
    id: int
    version: str
    filename: str
    file_size: int
    uploaded_by: Optional[str] = None
    notes: Optional[str] = None
    uploaded_at: UtcDatetime

    model_config = ConfigDict(from_attributes=True)
