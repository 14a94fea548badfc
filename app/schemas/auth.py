from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., examples=["admin@example.com"])
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class ErrorResponse(BaseModel):
    detail: str
