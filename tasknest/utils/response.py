from typing import Any, Dict, List, Optional

from fastapi import Response
from fastapi.responses import JSONResponse

from tasknest.utils.dates import isoformat, utcnow


def envelope(
    success: bool,
    data: Any = None,
    message: Optional[str] = None,
    error: Optional[str] = None,
    code: Optional[str] = None,
    errors: Optional[Dict[str, List[str]]] = None,
) -> Dict[str, Any]:
    """Build the response body every endpoint returns.

    Optional keys are left out when empty; `data` is kept when it is an empty
    list or zero so that empty result sets still carry a payload.
    """
    body: Dict[str, Any] = {"success": success, "timestamp": isoformat(utcnow())}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if error:
        body["error"] = error
    if code:
        body["code"] = code
    if errors:
        body["errors"] = errors
    return body


def send_success(data: Any, message: Optional[str] = None, status_code: int = 200) -> Response:
    if status_code == 204:
        return Response(status_code=204)
    return JSONResponse(status_code=status_code, content=envelope(True, data=data, message=message))


def send_error(
    message: str,
    status_code: int = 500,
    code: Optional[str] = None,
    errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(False, error=message, code=code, errors=errors),
    )
