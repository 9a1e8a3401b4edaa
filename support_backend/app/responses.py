"""Response envelopes shared by the API routers."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def request_id(prefix: str) -> str:
    return f"{prefix}_{int(datetime.now(timezone.utc).timestamp() * 1000)}"


def to_wire(value: Any) -> Any:
    """Serialize models (or lists/dicts of them) to camelCase JSON values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    return value


def success(data: Any, **metadata) -> Dict[str, Any]:
    """{"success": true, "data": ..., "metadata": {...}} with a timestamp."""
    return {
        "success": True,
        "data": to_wire(data),
        "metadata": {**to_wire(metadata), "timestamp": iso_now()},
    }


def failure(status_code: int, error: str, message: Optional[str] = None, details: Any = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)
