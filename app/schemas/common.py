from typing import Any, Dict, Generic, List, TypeVar, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts either on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ResponseModel(BaseModel, Generic[T]):
    """Standard API response model"""
    code: int = 200
    data: Optional[T] = None
    msg: str = "success"


class ErrorDetail(BaseModel):
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response"""
    code: int
    data: None = None
    msg: str
    details: Optional[List[ErrorDetail]] = None


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation failed or referenced record missing"},
    404: {"model": ErrorResponse, "description": "Record not found"},
    409: {"model": ErrorResponse, "description": "Record already exists"},
    503: {"model": ErrorResponse, "description": "Database unavailable"},
}
