"""
Introspection helpers for captured exceptions.

Python exceptions do not carry file/line/code attributes the way some
runtimes do; these helpers derive them from the traceback and well-known
attributes so the rest of the pipeline can treat every exception alike.
"""

import traceback
from typing import Iterator, Optional, Tuple


def exception_type_name(exception: BaseException) -> str:
    """Qualified type name, e.g. 'ValueError' or 'sqlalchemy.exc.OperationalError'."""
    cls = type(exception)
    module = cls.__module__
    if module in ('builtins', '__builtin__'):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def exception_location(exception: BaseException) -> Tuple[str, int]:
    """
    File and line where the exception was raised.

    Uses the innermost traceback frame. Exceptions that were never raised
    have no traceback and report ('', 0).
    """
    tb = exception.__traceback__
    if tb is None:
        return '', 0
    frames = traceback.extract_tb(tb)
    if not frames:
        return '', 0
    frame = frames[-1]
    return frame.filename or '', frame.lineno or 0


def exception_code(exception: BaseException) -> int:
    """Numeric code: errno for OSError, a numeric ``code`` attribute, else 0."""
    errno = getattr(exception, 'errno', None)
    if isinstance(errno, int):
        return errno
    code = getattr(exception, 'code', None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return 0


def exception_message(exception: BaseException) -> str:
    try:
        return str(exception)
    except Exception:
        return repr(exception)


def previous_exception(exception: BaseException) -> Optional[BaseException]:
    """Explicit cause first, then implicit context unless suppressed."""
    if exception.__cause__ is not None:
        return exception.__cause__
    if exception.__context__ is not None and not exception.__suppress_context__:
        return exception.__context__
    return None


def iter_previous_exceptions(exception: BaseException) -> Iterator[BaseException]:
    """Walk the cause chain starting after ``exception``; cycles are broken."""
    seen = {id(exception)}
    current = previous_exception(exception)
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = previous_exception(current)


def format_trace(exception: BaseException) -> str:
    return ''.join(traceback.format_exception(type(exception), exception, exception.__traceback__))
