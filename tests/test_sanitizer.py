"""Tests for the extra-data sanitizer."""
import json

import pytest

from apex_logger import LoggerConfig, MASK_VALUE, sanitize_data
from apex_logger.sanitizer import is_sensitive_key, mask_sensitive_fields


@pytest.fixture
def config():
    return LoggerConfig()


class TestMasking:
    """Tests for sensitive-field masking."""

    def test_masks_matching_keys_only(self, config):
        result = sanitize_data({"password": "abc", "user": "bob"}, config)
        assert result == {"password": MASK_VALUE, "user": "bob"}

    def test_match_is_case_insensitive_substring(self, config):
        data = {"UserPassword": "x", "API_TOKEN": "y", "ssn_last4": "1234", "name": "n"}
        result = sanitize_data(data, config)
        assert result["UserPassword"] == MASK_VALUE
        assert result["API_TOKEN"] == MASK_VALUE
        assert result["ssn_last4"] == MASK_VALUE
        assert result["name"] == "n"

    def test_masking_coverage(self, config):
        """Every key containing a sensitive term is masked; every other value is untouched."""
        data = {f"{prefix}{field}": i for i, field in enumerate(config.sensitive_fields) for prefix in ("", "my_")}
        data.update({"amount": 10, "items": [1, 2], "nested": {"a": 1}})
        result = sanitize_data(data, config)
        for key, value in data.items():
            if is_sensitive_key(key, config.sensitive_fields):
                assert result[key] == MASK_VALUE
            else:
                assert result[key] == value

    def test_top_level_only_by_default(self, config):
        data = {"login": {"password": "abc"}}
        assert sanitize_data(data, config) == data

    def test_recursive_masking(self, config):
        config.configure(recursive_masking=True)
        data = {"login": {"password": "abc", "user": "bob"}, "cards": [{"token": "t"}]}
        result = sanitize_data(data, config)
        assert result == {"login": {"password": MASK_VALUE, "user": "bob"}, "cards": [{"token": MASK_VALUE}]}

    def test_disabled_masking_returns_data(self, config):
        config.configure(enable_data_masking=False)
        data = {"password": "abc"}
        assert sanitize_data(data, config) == data

    def test_custom_fields(self, config):
        config.configure(sensitiveFields=["credit_card"])
        result = sanitize_data({"credit_card_number": "4111", "password": "p"}, config)
        assert result == {"credit_card_number": MASK_VALUE, "password": "p"}

    def test_does_not_modify_input(self, config):
        data = {"password": "abc"}
        sanitize_data(data, config)
        assert data == {"password": "abc"}

    def test_non_dict_values_pass_through(self):
        assert mask_sensitive_fields(["password"], ["password"]) == ["password"]
        assert mask_sensitive_fields("password", ["password"]) == "password"


class TestTruncation:
    """Tests for size truncation."""

    def test_oversized_payload_is_wrapped(self, config):
        config.configure(max_data_size=100)
        data = {"blob": "x" * 500}
        serialized = json.dumps(data)
        result = sanitize_data(data, config)

        assert result["truncated"] is True
        assert result["originalSize"] == len(serialized)
        assert result["data"] == serialized[:100] + "..."
        assert len(result["data"]) <= 100 + len("...")

    def test_truncated_payload_is_not_masked(self, config):
        config.configure(max_data_size=100)
        result = sanitize_data({"password": "x" * 500}, config)
        assert "password" in result["data"]
        assert MASK_VALUE not in result["data"]

    def test_payload_at_limit_is_kept(self, config):
        data = {"a": "b"}
        config.configure(max_data_size=len(json.dumps(data)))
        assert sanitize_data(data, config) == data


class TestSerializationErrors:
    """Tests for cyclic and non-serializable data."""

    def test_cycle_becomes_error_wrapper(self, config):
        data = {"name": "loop"}
        data["self"] = data
        result = sanitize_data(data, config)
        assert result["error"] == "Could not serialize data"
        assert result["type"] == "dict"
        assert len(result["preview"]) <= 100

    def test_cyclic_list(self, config):
        items = [1]
        items.append(items)
        assert sanitize_data(items, config)["type"] == "list"

    def test_non_json_object(self, config):
        result = sanitize_data({"when": object()}, config)
        assert result["error"] == "Could not serialize data"

    def test_unprintable_object_does_not_raise(self, config):
        class Broken:
            def __str__(self):
                raise RuntimeError("no")

        result = sanitize_data(Broken(), config)
        assert result["type"] == "Broken"
        assert result["preview"] == "<Broken>"


class TestIdempotence:
    """Sanitizing twice gives the same result as sanitizing once."""

    @pytest.mark.parametrize("make_data", [
        lambda: {"password": "abc", "user": "bob"},
        lambda: {"blob": "x" * 500},
        lambda: [1, 2, 3],
        lambda: "plain text",
    ])
    def test_second_pass_is_a_no_op(self, config, make_data):
        config.configure(max_data_size=100)
        once = sanitize_data(make_data(), config)
        assert sanitize_data(once, config) == once

    def test_error_wrapper_is_stable(self, config):
        data = {}
        data["self"] = data
        once = sanitize_data(data, config)
        assert sanitize_data(once, config) == once

    @pytest.mark.parametrize("value", [None, 0, "", {}, []])
    def test_empty_values_pass_through(self, config, value):
        assert sanitize_data(value, config) == value


class TestFalsyValues:
    """Empty values still have to be JSON-serializable."""

    @pytest.mark.parametrize("value", [set(), b"", frozenset()])
    def test_empty_non_json_values_are_wrapped(self, config, value):
        result = sanitize_data(value, config)
        assert result["error"] == "Could not serialize data"
        assert result["type"] == type(value).__name__
        json.dumps(result)
