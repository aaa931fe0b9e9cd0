# tests/test_shared.py
"""
Shared Utility Tests - Validators, Batching and Logging Setup

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- pricing_oracle.shared.validators
- pricing_oracle.shared.batching
- pricing_oracle.shared.logging_conf
"""
import logging
from decimal import Decimal
from logging.handlers import RotatingFileHandler

import pytest

from pricing_oracle.shared.batching import BatchPolicy, iter_batches
from pricing_oracle.shared.logging_conf import setup_logging
from pricing_oracle.shared.validators import (
    parse_optional_decimal,
    parse_positive_decimal,
    validate_api_key,
    validate_contract_address,
    validate_currency_symbol,
)


class TestValidators:
    def test_api_key(self):
        assert validate_api_key("abcdefghij")
        assert not validate_api_key("short")
        assert not validate_api_key("")

    @pytest.mark.parametrize("symbol,ok", [("EUR", True), ("jpy", True), ("EURO", False), ("E1R", False), ("", False)])
    def test_currency_symbol(self, symbol, ok):
        assert validate_currency_symbol(symbol) is ok

    @pytest.mark.parametrize("contract,ok", [
        ("0x" + "aB" * 20, True),
        ("0x1234", False),
        ("0x" + "g" * 40, False),
        ("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", True),
        ("has space", False),
        ("", False),
    ])
    def test_contract_address(self, contract, ok):
        assert validate_contract_address(contract) is ok

    def test_parse_optional_decimal(self):
        assert parse_optional_decimal("1.50") == Decimal("1.50")
        assert parse_optional_decimal(1.1) == Decimal("1.1")
        assert parse_optional_decimal(None) is None
        assert parse_optional_decimal(True) is None
        assert parse_optional_decimal("abc") is None
        assert parse_optional_decimal("NaN") is None
        assert parse_optional_decimal(float("inf")) is None

    def test_parse_positive_decimal(self):
        assert parse_positive_decimal("0.0001") == Decimal("0.0001")
        assert parse_positive_decimal("0") is None
        assert parse_positive_decimal(-2) is None


class TestBatching:
    def test_iter_batches(self):
        assert list(iter_batches(list(range(10)), 8)) == [list(range(8)), [8, 9]]
        assert list(iter_batches([], 8)) == []

    def test_iter_batches_bad_size(self):
        with pytest.raises(ValueError):
            list(iter_batches([1], 0))

    def test_policy_defaults(self):
        policy = BatchPolicy()
        assert policy.max_items == 8
        assert policy.delay_seconds == 0

    @pytest.mark.parametrize("kwargs", [{"max_items": 0}, {"delay_seconds": -1}])
    def test_policy_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            BatchPolicy(**kwargs)


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for h in root.handlers:
            if h not in handlers:
                h.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_file_handler_with_rotation(self, tmp_path):
        setup_logging("debug", log_dir=tmp_path, log_to_stdout=False, max_bytes=1024, backup_count=2)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024
        assert (tmp_path / "pricing_oracle.log").exists()
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_stderr_fallback_without_handlers(self):
        setup_logging(logging.INFO, log_to_stdout=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert not isinstance(root.handlers[0], RotatingFileHandler)
