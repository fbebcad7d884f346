"""
Framework-neutral view of the request that was being handled when the
error happened.

Host integrations (see error_reporting.integrations.flask) build a
RequestContext from their own request object; everything downstream only
ever sees this dataclass.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

AREA_FRONTEND = 'frontend'
AREA_ADMIN = 'admin'
AREA_API = 'api'

_ADMIN_MARKERS = ('/admin/', '/backend/')
_API_MARKERS = ('/rest/', '/soap/', '/graphql', '/api/')


@dataclass
class RequestContext:
    """Request data the collector and controller filter need."""
    method: str = 'GET'
    scheme: str = 'http'
    host: str = ''
    path: str = '/'  # request URI including query string
    route: Tuple[str, ...] = ()  # controller-action parts, e.g. ('checkout', 'cart', 'index')
    is_ajax: bool = False
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    area: Optional[str] = None
    form: Optional[Dict[str, Any]] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str, **kwargs) -> 'RequestContext':
        """Build a context from an absolute URL (handy for jobs and tests)."""
        parts = urlsplit(url)
        path = parts.path or '/'
        if parts.query:
            path = f"{path}?{parts.query}"
        return cls(
            scheme=parts.scheme or 'http',
            host=parts.netloc,
            path=path,
            **kwargs
        )

    @property
    def is_secure(self) -> bool:
        return self.scheme == 'https'

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}" if self.host else ''

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def full_action_name(self, delimiter: str = '/') -> str:
        """Controller-action identifier joined with ``delimiter``."""
        return delimiter.join(part for part in self.route if part).strip(delimiter)


def detect_area(request: Optional[RequestContext]) -> str:
    """Classify the request as frontend, admin or api."""
    if request is None:
        return AREA_FRONTEND
    if request.area:
        return request.area

    path = request.path or ''
    if any(marker in path for marker in _ADMIN_MARKERS):
        return AREA_ADMIN
    if any(marker in path for marker in _API_MARKERS):
        return AREA_API
    return AREA_FRONTEND
