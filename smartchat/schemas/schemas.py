"""
Pydantic schemas for request validation and response serialization.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Dashboard auth
# ---------------------------------------------------------------------------

class PasswordRequest(BaseModel):
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------

class WidgetSummary(BaseModel):
    # extra="ignore" keeps owner_id and friends out of responses
    model_config = ConfigDict(extra="ignore")

    id: str
    widget_key: str
    welcome_message: Optional[str] = None
    primary_color: Optional[str] = None
    ai_instructions: Optional[str] = None
