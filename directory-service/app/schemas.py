from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: str
    name: str
    username: str
    email: str
    phone: str
    address: str

    class Config:
        from_attributes = True


class CountResponse(BaseModel):
    count: int


class PostCreate(BaseModel):
    # Optional so that missing fields are reported together by the route
    title: Optional[str] = None
    body: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        coerce_numbers_to_str = True

    def missing_fields(self) -> list[str]:
        return [field for field in ("title", "body", "user_id") if not getattr(self, field)]


class PostResponse(BaseModel):
    id: str
    user_id: str
    title: str
    body: str
    created_at: str

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
