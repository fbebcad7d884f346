"""
Unit tests for error hash generation.

The hash groups identical faults: same (type, message, file, line) must
give the same hash, and changing any one of them must change it.

Related: error_reporting/collector/hash_generator.py
"""

import hashlib

import pytest

from error_reporting.collector.hash_generator import ErrorHashGenerator, compute_error_hash


class TestComputeErrorHash:
    """Test the pure hash function."""

    def test_identical_identity_gives_identical_hash(self):
        first = compute_error_hash('ValueError', 'bad sku', '/srv/app/cart.py', 10)
        second = compute_error_hash('ValueError', 'bad sku', '/srv/app/cart.py', 10)
        assert first == second

    def test_hash_is_sha256_of_joined_identity(self):
        expected = hashlib.sha256(b'ValueError:bad sku:/srv/app/cart.py:10').hexdigest()
        assert compute_error_hash('ValueError', 'bad sku', '/srv/app/cart.py', 10) == expected
        assert len(expected) == 64

    def test_line_accepts_string(self):
        assert compute_error_hash('E', 'm', 'f', '7') == compute_error_hash('E', 'm', 'f', 7)

    @pytest.mark.parametrize('field_index,new_value', [
        (0, 'TypeError'),
        (1, 'other message'),
        (2, '/srv/app/other.py'),
        (3, 11),
    ])
    def test_any_changed_field_changes_hash(self, field_index, new_value):
        identity = ['ValueError', 'bad sku', '/srv/app/cart.py', 10]
        baseline = compute_error_hash(*identity)

        identity[field_index] = new_value
        assert compute_error_hash(*identity) != baseline


class TestErrorHashGenerator:
    """Test hashing of real exceptions."""

    def test_same_fault_raised_twice_gives_same_hash(self, raise_and_catch):
        generator = ErrorHashGenerator()
        first = raise_and_catch(RuntimeError("Payment gateway timed out"))
        second = raise_and_catch(RuntimeError("Payment gateway timed out"))

        assert generator.generate(first) == generator.generate(second)

    def test_different_message_gives_different_hash(self, raise_and_catch):
        generator = ErrorHashGenerator()
        first = raise_and_catch(RuntimeError("Payment gateway timed out"))
        second = raise_and_catch(RuntimeError("Payment gateway refused"))

        assert generator.generate(first) != generator.generate(second)

    def test_different_type_gives_different_hash(self, raise_and_catch):
        generator = ErrorHashGenerator()
        first = raise_and_catch(RuntimeError("boom"))
        second = raise_and_catch(ValueError("boom"))

        assert generator.generate(first) != generator.generate(second)

    def test_unraised_exception_has_empty_location(self):
        exception = ValueError("never raised")
        expected = compute_error_hash('ValueError', 'never raised', '', 0)

        assert ErrorHashGenerator().generate(exception) == expected
