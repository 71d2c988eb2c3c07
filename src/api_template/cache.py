"""Cache-Control headers for static files.

``cache_headers`` turns a CacheProfile into response headers;
``CachedStaticFiles`` applies one profile to every file it serves.
"""

from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from api_template.config import CacheProfile

_CACHEABILITY = {"any": "public", "client": "private", "none": "no-cache"}


def cache_headers(profile: CacheProfile) -> dict[str, str]:
    """Return the Cache-Control, Pragma and Vary headers for ``profile``."""
    headers: dict[str, str] = {}
    if profile.vary_by_header:
        headers["Vary"] = profile.vary_by_header

    if profile.no_store:
        cache_control = "no-store"
        if profile.location == "none":
            cache_control += ",no-cache"
            headers["Pragma"] = "no-cache"
    else:
        cache_control = f"{_CACHEABILITY[profile.location]},max-age={profile.duration}"
        if profile.location == "none":
            headers["Pragma"] = "no-cache"

    headers["Cache-Control"] = cache_control
    return headers


class CachedStaticFiles(StaticFiles):
    """StaticFiles that stamps a cache profile onto successful responses."""

    def __init__(self, *, cache_profile: CacheProfile, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.cache_profile = cache_profile

    async def get_response(self, path: str, scope: Scope) -> Response:
        response = await super().get_response(path, scope)
        if response.status_code < 400:
            response.headers.update(cache_headers(self.cache_profile))
        return response
