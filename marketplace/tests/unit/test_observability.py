from unittest.mock import MagicMock

from django.test import SimpleTestCase
from prometheus_client import REGISTRY

from marketplace.domain.errors import ConcurrencyConflict
from marketplace.infra.observability.tracing import add_span_attributes
from marketplace.services.base import BaseService, service_err, service_ok
from marketplace.services.concurrency import conflict_retrying


class OperationalEndpointsTest(SimpleTestCase):
    def test_health_check(self):
        response = self.client.get("/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_metrics_exposition(self):
        response = self.client.get("/metrics/")

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"marketplace_orders_placed_total", response.content)

    def test_endpoints_are_read_only(self):
        self.assertEqual(self.client.post("/health/").status_code, 405)


class ConflictRetryingTest(SimpleTestCase):
    def _conflicts(self):
        return REGISTRY.get_sample_value("marketplace_concurrency_conflicts_total", {"aggregate": "Order"}) or 0

    async def test_retries_until_success(self):
        before = self._conflicts()
        attempts = []

        async for attempt in conflict_retrying(3):
            with attempt:
                attempts.append(attempt.retry_state.attempt_number)
                if len(attempts) < 3:
                    raise ConcurrencyConflict("Order", "order-1", len(attempts))

        self.assertEqual(attempts, [1, 2, 3])
        self.assertEqual(self._conflicts() - before, 2)

    async def test_conflict_reraised_when_exhausted(self):
        with self.assertRaises(ConcurrencyConflict):
            async for attempt in conflict_retrying(2):
                with attempt:
                    raise ConcurrencyConflict("Order", "order-1", 0)

    async def test_other_errors_are_not_retried(self):
        attempts = []

        with self.assertRaises(KeyError):
            async for attempt in conflict_retrying(3):
                with attempt:
                    attempts.append(1)
                    raise KeyError("order-1")

        self.assertEqual(len(attempts), 1)


class SpanAttributesTest(SimpleTestCase):
    def test_values_are_stringified(self):
        span = MagicMock()

        add_span_attributes(span, order_id="order-1", total=25.5)

        span.set_attribute.assert_any_call("order_id", "order-1")
        span.set_attribute.assert_any_call("total", "25.5")


class TimedService(BaseService):
    @BaseService.log_performance
    async def succeed(self):
        return service_ok(1)

    @BaseService.log_performance
    async def fail(self):
        return service_err("conflict", "lost the race")

    @BaseService.log_performance
    async def explode(self):
        raise RuntimeError("boom")


class LogPerformanceTest(SimpleTestCase):
    def setUp(self):
        self.service = TimedService()
        self.logger_name = self.service.logger.name

    async def test_success_logged_at_info(self):
        with self.assertLogs(self.logger_name, level="INFO") as logs:
            result = await self.service.succeed()

        self.assertTrue(result.ok)
        self.assertIn("TimedService.succeed completed successfully", logs.output[-1])

    async def test_failed_result_logged_as_warning(self):
        with self.assertLogs(self.logger_name, level="WARNING") as logs:
            result = await self.service.fail()

        self.assertEqual(result.error, "conflict")
        self.assertIn("failed with error 'conflict'", logs.output[0])

    async def test_exception_logged_and_reraised(self):
        with self.assertLogs(self.logger_name, level="ERROR") as logs:
            with self.assertRaises(RuntimeError):
                await self.service.explode()

        self.assertIn("TimedService.explode raised exception", logs.output[0])

    def test_wrapper_keeps_method_name(self):
        self.assertEqual(TimedService.succeed.__name__, "succeed")
