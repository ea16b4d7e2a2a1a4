"""
Profile schemas.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict

from worldkernel.schemas.common import UtcDatetime


class ProfileResponse(BaseModel):
    """Public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    created_at: UtcDatetime
