"""Auth form schemas."""

from pydantic import BaseModel


class LoginForm(BaseModel):
    password: str = ""
