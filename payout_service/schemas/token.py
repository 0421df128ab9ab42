# payout_service/schemas/token.py
from pydantic import BaseModel, Field
from typing import Optional


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    role: str = "USER"
    sub_role: Optional[str] = Field(default=None, alias="subRole")
    name: Optional[str] = None
    email: Optional[str] = None
    exp: int  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,  # Allow populating by alias
        "from_attributes": True,
    }
