import json
import logging
import sys

from django.test import SimpleTestCase

from apps.common.logging import JSONFormatter, get_logger


def _record(msg="hello %s", args=("world",), exc_info=None, **extra):
    record = logging.LogRecord(
        name="apps.billing.services", level=logging.INFO, pathname=__file__,
        lineno=10, msg=msg, args=args, exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class JSONFormatterTestCase(SimpleTestCase):

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        self.assertEqual(data["message"], "hello world")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "apps.billing.services")
        self.assertTrue(data["timestamp"].endswith("Z"))
        self.assertNotIn("extra", data)

    def test_extra_fields(self):
        data = json.loads(JSONFormatter().format(_record(team_id=7, obj=object())))
        self.assertEqual(data["extra"]["team_id"], 7)
        # Non-serializable values are stringified
        self.assertIsInstance(data["extra"]["obj"], str)

    def test_exception_info(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        self.assertEqual(data["exception"]["type"], "RuntimeError")
        self.assertEqual(data["exception"]["message"], "boom")


class ContextLoggerTestCase(SimpleTestCase):

    def test_context_is_merged_into_extra(self):
        log = get_logger("apps.tests").with_context(trace_id="ab12")
        msg, kwargs = log.process("msg", {"extra": {"payment_id": "p-1"}})
        self.assertEqual(kwargs["extra"], {"trace_id": "ab12", "payment_id": "p-1"})

    def test_call_time_extra_wins(self):
        log = get_logger("apps.tests").with_context(trace_id="ab12")
        _, kwargs = log.process("msg", {"extra": {"trace_id": "override"}})
        self.assertEqual(kwargs["extra"]["trace_id"], "override")
