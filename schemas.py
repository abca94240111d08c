from pydantic import BaseModel


class ShortenResponse(BaseModel):
    original_url: str
    short_url: int


class ErrorResponse(BaseModel):
    error: str
