from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Optional, Any
from pydantic import BaseModel


def _serialize(data: Any) -> Any:
    # Pydantic models are dumped by alias so the API speaks camelCase
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [_serialize(item) for item in data]
    return jsonable_encoder(data)


def build_response(
    status_code: int,
    status: str = None,
    message: str = None,
    data: Any = None,
    error: Optional[str] = None,
) -> JSONResponse:
    response = {}

    if status is not None:
        response["status"] = status

    if message is not None:
        response["message"] = message

    if data is not None:
        response["data"] = _serialize(data)

    if error is not None:
        response["error"] = error

    return JSONResponse(
        content=response,
        status_code=status_code,
        media_type="application/json"
    )
