from fastapi import Request

FLASH_KEY = "_flashes"


def flash(request: Request, category: str, message: str) -> None:
    flashes = request.session.get(FLASH_KEY, [])
    flashes.append([category, message])
    # reassign: the session only notices top-level writes
    request.session[FLASH_KEY] = flashes


def pop_flashes(request: Request) -> list:
    """Return queued ``(category, message)`` pairs and forget them."""
    return [tuple(item) for item in request.session.pop(FLASH_KEY, [])]
