"""
Structured error report built once per captured exception.

The report is created by ErrorDataCollector and only read afterwards by
the filter, throttle and notification stages.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ErrorInfo:
    """Identity of the fault. Immutable once created."""
    message: str
    type: str
    code: int
    file: str
    line: int
    hash: str
    severity: str


@dataclass
class RequestInfo:
    url: str = ''
    method: str = ''
    is_ajax: bool = False
    is_secure: bool = False
    area: str = 'frontend'


@dataclass
class ClientInfo:
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None


@dataclass
class UserInfo:
    type: str = 'guest'  # guest | authenticated
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.type == 'guest'

    def display_name(self) -> str:
        """'Guest' or 'name (#id)'."""
        if self.is_guest:
            return 'Guest'
        return f"{self.name or self.email or 'Unknown'} (#{self.id or 'N/A'})"


@dataclass
class StoreInfo:
    name: str = ''
    code: str = 'default'
    base_url: str = ''


@dataclass
class PreviousException:
    index: int
    type: str
    message: str
    file: str
    line: int


@dataclass
class ErrorReport:
    """Canonical error record passed through filter -> throttle -> dispatch."""
    error: ErrorInfo
    timestamp: str
    timestamp_formatted: str
    request: RequestInfo = field(default_factory=RequestInfo)
    client: ClientInfo = field(default_factory=ClientInfo)
    user: UserInfo = field(default_factory=UserInfo)
    store: StoreInfo = field(default_factory=StoreInfo)
    trace: Optional[str] = None
    previous_exceptions: List[PreviousException] = field(default_factory=list)
    environment: Optional[Dict[str, str]] = None
    post_data: Optional[Dict[str, Any]] = None

    @property
    def area(self) -> str:
        return self.request.area

    @property
    def severity(self) -> str:
        return self.error.severity

    @property
    def hash(self) -> str:
        return self.error.hash

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
