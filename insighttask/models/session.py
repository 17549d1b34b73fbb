"""
Authenticated session model
"""

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Identity of the signed-in owner, passed explicitly to every component"""

    model_config = ConfigDict(frozen=True)

    access_token: str
    user_id: str
