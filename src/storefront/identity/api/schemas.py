"""Pydantic request/response schemas for the users API."""

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterUserRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"}]
        }
    }

    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)


class UpdateUserRequest(BaseModel):
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=254)
    first_name: str | None = Field(None, min_length=2, max_length=50)
    last_name: str | None = Field(None, min_length=2, max_length=50)
    role: str | None = Field(None, pattern=r"^(user|admin)$")
    is_active: bool | None = None


class UserIdResponse(BaseModel):
    user_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
