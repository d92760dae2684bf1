from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        if len(v) > 100:
            raise ValueError("username too long: must be at most 100 characters")
        return v

    @field_validator("password")
    @classmethod
    def password_max_bytes(cls, v: str) -> str:
        """Ensure password is non-empty and fits bcrypt's 72-byte limit when UTF-8 encoded.

        Raise a validation error so the API returns a 400 with a clear message.
        """
        if not v:
            raise ValueError("password cannot be empty")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
        return v


class LoginResponse(BaseModel):
    message: str
    token: str
    user_id: int
