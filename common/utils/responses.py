"""
Response envelopes shared by every endpoint.

Success:  {"success": true, "data": ..., "message"?: str}
Lists:    {"success": true, "data": [...], "count": int}
Errors:   {"success": false, "error": {"message", "code"?, "details"?}}

Example:
    @router.get("/faq")
    async def get_faqs():
        return list_response(await faq_service.list_faqs())
"""

from typing import Any, Optional, Dict


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Wrap a payload; data and message are omitted when empty."""
    response: Dict[str, Any] = {"success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Build the error envelope.

    Args:
        message: Human-readable message
        code: Machine-readable code (e.g. "REGISTRATION_CLOSED")
        details: Per-field errors, keyed by field name
    """
    error: Dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def list_response(items: list, message: Optional[str] = None) -> Dict[str, Any]:
    response = success_response(items, message)
    # Empty lists still carry data
    response["data"] = items
    response["count"] = len(items)
    return response
