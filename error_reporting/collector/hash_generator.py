"""
Hash utility for grouping identical errors.

The hash is a SHA256 digest of the exception type, message, file and
line. Nothing request-specific goes in, so the same fault always maps to
the same hash no matter which URL or user triggered it.
"""
import hashlib
from typing import Union

from error_reporting.collector.exception_info import (
    exception_location,
    exception_message,
    exception_type_name,
)

HASH_DELIMITER = ':'


def compute_error_hash(type_name: str, message: str, file_path: str, line: Union[int, str]) -> str:
    """
    Compute the SHA256 hex digest for an error identity tuple.

    Static function so it can be reused for records that only carry the
    four identity fields (e.g. tracking files).

    Returns:
        64-character hex hash string
    """
    canonical_string = HASH_DELIMITER.join([type_name, message, file_path, str(int(line))])
    return hashlib.sha256(canonical_string.encode('utf-8', errors='replace')).hexdigest()


class ErrorHashGenerator:
    """Derive the grouping hash for a captured exception."""

    def generate(self, exception: BaseException) -> str:
        file_path, line = exception_location(exception)
        return compute_error_hash(
            exception_type_name(exception),
            exception_message(exception),
            file_path,
            line,
        )
