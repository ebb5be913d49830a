"""
Pydantic schemas for the mail relay endpoint.
"""

from pydantic import BaseModel, Field
from typing import Optional


class EmailSendRequest(BaseModel):
    """
    Relay payload. Fields are optional here so that missing ones are
    reported with the relay's own 400 message instead of a 422.
    """

    to: Optional[str] = Field(None, description="Recipient address")
    subject: Optional[str] = Field(None, description="Subject line")
    html: Optional[str] = Field(None, description="HTML body")

    @property
    def missing_fields(self) -> bool:
        return not (self.to and self.subject and self.html)


class EmailSendResponse(BaseModel):
    success: bool = True
