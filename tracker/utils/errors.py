"""Helpers to turn arbitrary failures into user-facing messages."""

UNKNOWN_ERROR_MESSAGE = "Erro desconhecido"


def get_error_message(err) -> str:
    if isinstance(err, BaseException):
        return str(err) or err.__class__.__name__
    message = getattr(err, "message", None)
    if isinstance(message, str):
        return message
    if isinstance(err, dict) and isinstance(err.get("message"), str):
        return err["message"]
    return UNKNOWN_ERROR_MESSAGE
