from pydantic import BaseModel


class ValidationErrorOut(BaseModel):
    """Body of a rejected request"""
    status: int
    message: str
    stack: str | None = None  # only when SHOW_STACK is on
    payload: dict[str, str]  # field -> message
