from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def normalize_email(value: str) -> str:
    # one canonical form for storage and every lookup
    return value.strip().lower()


class RegisterIn(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)
    phone_number: str = Field(..., min_length=1, max_length=30)

    @field_validator("email", mode="after")
    @classmethod
    def _canonical_email(cls, v: str) -> str:
        return normalize_email(v)


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    email: str
    phone_number: str
    balance: Decimal
