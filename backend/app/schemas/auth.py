from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^\s*[^@\s]+@[^@\s]+\s*$"


class VerificationCodeRequest(BaseModel):
    email: str = Field(..., min_length=3, pattern=EMAIL_PATTERN)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        # Codes are keyed by address, so A@x.com and a@x.com share one entry.
        return value.strip().lower()


class VerificationCodeSubmission(BaseModel):
    email: str = Field(..., min_length=3, pattern=EMAIL_PATTERN)
    code: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.strip().lower()


class MessageResponse(BaseModel):
    message: str
