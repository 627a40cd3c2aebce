from fastapi import Request

from app.config import settings


def public_base_url(request: Request) -> str:
    """Root for every link handed to clients: configured override, else scheme://host of the request."""
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"
