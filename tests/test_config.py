import io
import json
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from bitstamp_client.infra.config import load_config
from bitstamp_client.infra.logging import JsonFormatter, configure_logging
from bitstamp_client.infra.metrics import MetricsSink

SAMPLE_YAML = """
log_level: DEBUG
api:
  key: file-key
  secret: file-secret
  client_id: 123123
  timeout_seconds: 2.5
  rate_limit: false
  max_calls_per_window: 600
  window_seconds: 600
  on_parse_failure: passthrough
stream:
  websocket_url: wss://ws.example
  max_retries: 3
"""


class LoadConfigTest(unittest.TestCase):
    def write_config(self, text: str) -> Path:
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        with handle:
            handle.write(text)
        self.addCleanup(os.unlink, handle.name)
        return Path(handle.name)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_defaults_without_file(self) -> None:
        cfg = load_config()

        self.assertEqual("https://www.bitstamp.net/api/v2", cfg.api.base_url)
        self.assertEqual(60, cfg.api.max_calls_per_window)
        self.assertEqual(60.0, cfg.api.window_seconds)
        self.assertTrue(cfg.api.rate_limit)
        self.assertEqual("fail", cfg.api.on_parse_failure)
        self.assertFalse(cfg.api.has_credentials)
        self.assertEqual("wss://ws.bitstamp.net", cfg.stream.websocket_url)
        self.assertEqual(10, cfg.stream.max_retries)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_yaml_values(self) -> None:
        cfg = load_config(self.write_config(SAMPLE_YAML))

        self.assertEqual("DEBUG", cfg.log_level)
        self.assertEqual("123123", cfg.api.client_id)
        self.assertEqual(2.5, cfg.api.timeout_seconds)
        self.assertFalse(cfg.api.rate_limit)
        self.assertEqual(600, cfg.api.max_calls_per_window)
        self.assertEqual("passthrough", cfg.api.on_parse_failure)
        self.assertEqual("wss://ws.example", cfg.stream.websocket_url)
        self.assertEqual(3, cfg.stream.max_retries)
        self.assertTrue(cfg.api.has_credentials)

    def test_environment_overrides_credentials(self) -> None:
        path = self.write_config(SAMPLE_YAML)
        with mock.patch.dict(os.environ, {"BITSTAMP_KEY": "env-key", "BITSTAMP_SECRET": "env-secret"}, clear=True):
            cfg = load_config(path)

        self.assertEqual("env-key", cfg.api.key)
        self.assertEqual("env-secret", cfg.api.secret)
        self.assertEqual("123123", cfg.api.client_id)

    def test_secret_not_in_repr(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            cfg = load_config(self.write_config(SAMPLE_YAML))

        self.assertNotIn("file-secret", repr(cfg))

    def test_rejects_unknown_parse_policy(self) -> None:
        with self.assertRaises(ValueError):
            load_config(self.write_config("api:\n  on_parse_failure: ignore\n"))


class JsonLoggingTest(unittest.TestCase):
    def tearDown(self) -> None:
        logging.getLogger().handlers.clear()

    def test_extras_are_inlined_and_secrets_redacted(self) -> None:
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)

        logging.getLogger("bitstamp.test").info(
            "signed call", extra={"event": "gateway_call", "endpoint": "balance/", "signature": "ABC"}
        )

        record = json.loads(stream.getvalue().strip())
        self.assertEqual("signed call", record["message"])
        self.assertEqual("gateway_call", record["event"])
        self.assertEqual("balance/", record["endpoint"])
        self.assertEqual("***", record["signature"])
        self.assertEqual("INFO", record["level"])

    def test_formatter_includes_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))

        self.assertIn("ValueError: bad", payload["exc_info"])


class MetricsSinkTest(unittest.TestCase):
    def test_counters_and_gauges_are_prefixed(self) -> None:
        sink = MetricsSink()

        sink.incr("gateway_calls")
        sink.incr("gateway_calls")
        sink.set_gauge("gateway_calls_in_window", 2)

        self.assertEqual(2, sink.counter("gateway_calls"))
        self.assertEqual({"bitstamp_gateway_calls": 2, "bitstamp_gateway_calls_in_window": 2.0}, sink.export())

    def test_textfile_is_written(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metrics.prom"
            sink = MetricsSink(textfile=path)

            sink.incr("stream_frames")

            self.assertEqual("bitstamp_stream_frames 1\n", path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
