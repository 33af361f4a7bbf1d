"""
Tests for the delivery configuration and message templates.
"""
import json
import os
import tempfile
import unittest
from unittest.mock import Mock

from campus_recovery.delivery.base import RenderedMessage
from campus_recovery.delivery.config import Config, DeliveryConfig
from campus_recovery.delivery.templates import render_message


# Test constants
TEST_EVENTS = {
    "password_recovery": {
        "subject": "Code for {{ name }}",
        "text": "Your code is {{ code }}, valid {{ ttl_minutes }} minutes.",
        "html": "<p>Hi {{ name }}, your code is <b>{{ code }}</b></p>",
        "default_parameters": {"name": "there"},
    },
    "plain_only": {
        "subject": "Hello",
        "text": "Plain body",
    },
}
TEST_CONFIGURATIONS = [
    {"provider": "smtp", "host": "smtp.gmail.com", "port": 587, "security": "starttls"},
    {"provider": "smtp", "host": "smtp.gmail.com", "port": 465, "security": "ssl"},
]


class DeliveryConfigTestCase(unittest.TestCase):

    def _write_config(self, content):
        handle = tempfile.NamedTemporaryFile('w', suffix='.json', delete=False, encoding='UTF-8')
        with handle:
            json.dump(content, handle)
        self.addCleanup(os.remove, handle.name)
        return handle.name


class TestDeliveryConfig(DeliveryConfigTestCase):

    def test_reads_events_and_configurations(self):
        """
        Test that the JSON file populates events and configurations.

        Verifies:
        - configurations keep file order
        - credentials default to None
        - Mailjet API version defaults to v3.1
        """
        path = self._write_config({"events": TEST_EVENTS, "configurations": TEST_CONFIGURATIONS})

        config = DeliveryConfig(CONFIG_FILEPATH=path)

        self.assertEqual(config.get_event("password_recovery"), TEST_EVENTS["password_recovery"])
        self.assertIsNone(config.get_event("unknown"))
        self.assertEqual([c["port"] for c in config.get_configurations()], [587, 465])
        self.assertIsNone(config.SMTP_USERNAME)
        self.assertEqual(config.MAILJET_API_VERSION, 'v3.1')

    def test_credentials_come_from_environment(self):
        path = self._write_config({"events": TEST_EVENTS, "configurations": TEST_CONFIGURATIONS})
        os.environ["SMTP_USERNAME"] = "mailer@campus.edu"
        self.addCleanup(os.environ.pop, "SMTP_USERNAME", None)

        config = DeliveryConfig(CONFIG_FILEPATH=path)

        self.assertEqual(config.SMTP_USERNAME, "mailer@campus.edu")

    def test_missing_file_raises(self):
        with self.assertRaises(OSError):
            DeliveryConfig(CONFIG_FILEPATH="/nonexistent/delivery.json")

    def test_configuration_without_provider_raises(self):
        path = self._write_config({"events": {}, "configurations": [{"host": "smtp.gmail.com"}]})

        with self.assertRaises(ValueError):
            DeliveryConfig(CONFIG_FILEPATH=path)

    def test_no_configurations_is_allowed(self):
        path = self._write_config({"events": TEST_EVENTS})

        with self.assertLogs('campus_recovery.delivery.config', level='WARNING'):
            config = DeliveryConfig(CONFIG_FILEPATH=path)

        self.assertEqual(config.get_configurations(), [])


class TestRenderMessage(unittest.TestCase):

    def setUp(self):
        self.config = Mock(spec=Config)
        self.config.get_event.side_effect = TEST_EVENTS.get

    def test_renders_all_parts(self):
        message = render_message(self.config, "password_recovery",
                                 {"name": "Ada", "code": "012345", "ttl_minutes": 10})

        self.assertEqual(message, RenderedMessage(
            subject="Code for Ada",
            text="Your code is 012345, valid 10 minutes.",
            html="<p>Hi Ada, your code is <b>012345</b></p>",
        ))

    def test_default_parameters_fill_gaps(self):
        message = render_message(self.config, "password_recovery", {"code": "1", "ttl_minutes": 10})
        self.assertEqual(message.subject, "Code for there")

    def test_html_is_escaped(self):
        message = render_message(self.config, "password_recovery",
                                 {"name": "<script>", "code": "1", "ttl_minutes": 10})

        self.assertIn("&lt;script&gt;", message.html)
        self.assertEqual(message.subject, "Code for <script>")

    def test_html_is_optional(self):
        self.assertIsNone(render_message(self.config, "plain_only", {}).html)

    def test_unknown_event_raises(self):
        with self.assertRaises(ValueError):
            render_message(self.config, "unknown", {})


if __name__ == '__main__':
    unittest.main()
