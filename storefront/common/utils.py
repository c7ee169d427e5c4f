from datetime import datetime,timezone
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

def now() -> datetime:
    return datetime.now(timezone.utc)


def build_success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    if message is not None:
        content["message"] = message
    return content

def build_error(error: str, message: Optional[str] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        content["message"] = message
    return content

def json_ok(content: Dict[str, Any], status_code: int = 200,headers = None) -> JSONResponse:
    return JSONResponse(content, status_code=status_code,headers=headers)

def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(content, status_code=status_code, headers=headers)

def success_response(data: Any = None, status_code: int = 200, message: Optional[str] = None,
                     headers: Optional[Dict[str, Any]] = None) -> JSONResponse:
    content = build_success(data, message=message)
    return json_ok(jsonable(content), status_code=status_code,headers=headers)

def jsonable(content: Any) -> Any:
    return jsonable_encoder(content)
