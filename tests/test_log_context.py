"""Unit tests for app.core.log_context: context redaction and formatting."""

import json
import logging
import unittest

from app.core.log_context import format_with_context, get_logger, sanitize_context


class TestSanitizeContext(unittest.TestCase):
    def test_sensitive_string_keeps_four_characters(self) -> None:
        out = sanitize_context({"password": "hunter22", "email": "a@example.com"})
        self.assertEqual(out["password"], "hunt******")
        self.assertEqual(out["email"], "a@example.com")

    def test_key_match_is_substring_and_case_insensitive(self) -> None:
        out = sanitize_context({"accessToken": "abcdefgh", "API_KEY": "xyz12345", "clientSecret": "s3cr3tvalue"})
        self.assertEqual(out["accessToken"], "abcd******")
        self.assertEqual(out["API_KEY"], "xyz1******")
        self.assertEqual(out["clientSecret"], "s3cr******")

    def test_non_string_sensitive_values_are_redacted(self) -> None:
        out = sanitize_context({"token": 12345, "secret": None, "password": ""})
        self.assertEqual(out, {"token": "REDACTED", "secret": "REDACTED", "password": "REDACTED"})

    def test_nested_structures_are_walked(self) -> None:
        out = sanitize_context({"user": {"name": "A", "password": "longpassword"}, "items": [{"token": "abcdef"}]})
        self.assertEqual(out["user"]["password"], "long******")
        self.assertEqual(out["items"][0]["token"], "abcd******")

    def test_input_is_not_mutated(self) -> None:
        original = {"password": "hunter22"}
        sanitize_context(original)
        self.assertEqual(original["password"], "hunter22")


class TestFormatWithContext(unittest.TestCase):
    def test_without_context_returns_message(self) -> None:
        self.assertEqual(format_with_context("hello", None), "hello")

    def test_appends_sanitized_json(self) -> None:
        line = format_with_context("Signup", {"email": "a@example.com", "password": "hunter22"})
        message, payload = line.split(" ", 1)
        self.assertEqual(message, "Signup")
        self.assertEqual(json.loads(payload), {"email": "a@example.com", "password": "hunt******"})


class TestContextLogger(unittest.TestCase):
    def test_context_keyword_is_consumed_and_redacted(self) -> None:
        logger = get_logger("tests.log_context")
        with self.assertLogs("tests.log_context", level=logging.INFO) as captured:
            logger.info("User created", context={"user_id": "u1", "password": "hunter22"})
        self.assertEqual(len(captured.records), 1)
        message = captured.records[0].getMessage()
        self.assertIn('"user_id": "u1"', message)
        self.assertNotIn("hunter22", message)
