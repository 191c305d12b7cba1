import unittest
from typing import Protocol
from unittest.mock import MagicMock

from brandy import Container


class Contains:  # noqa: PLW1641
    def __init__(self, substring):
        self.substring = substring

    def __repr__(self):
        return f"Contains({self.substring!r})"

    def __eq__(self, other):
        return isinstance(other, str) and self.substring in other


class PaymentClient(Protocol):
    def charge(self, order_id: str, amount_cents: int) -> None: ...


class InfoLogger(Protocol):
    def info(self, msg: object, *args: object) -> None: ...


class NullLogger:
    def info(self, msg: object, *args: object) -> None:
        pass


class StripeSdk:
    def pay(self, amount_usd: float, reference: str) -> bool:
        return amount_usd > 0 and bool(reference)


class StripeAdapter:
    def __init__(self, sdk: StripeSdk, logger: InfoLogger, usd_per_cent: float = 0.01) -> None:
        self._logger = logger
        self._sdk = sdk
        self._usd_per_cent = usd_per_cent

    def charge(self, order_id: str, amount_cents: int) -> None:
        self._logger.info("adapting to stripe sdk api")
        amount_usd = amount_cents * self._usd_per_cent
        ok = self._sdk.pay(amount_usd, reference=order_id)
        if not ok:
            msg = "Stripe payment failed"
            raise RuntimeError(msg)


class TestWiringAdapterThirdPartySDK(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.stripe_sdk = StripeSdk()
        self.stripe_sdk.pay = MagicMock(wraps=self.stripe_sdk.pay)
        self.logger = NullLogger()
        self.logger.info = MagicMock(wraps=self.logger.info)

        (
            self.cont.bind(PaymentClient, StripeAdapter, dependencies=[StripeSdk, InfoLogger, "usd_per_cent"])
            .factory(StripeSdk, lambda: self.stripe_sdk)
            .factory(InfoLogger, lambda: self.logger)
            .factory("usd_per_cent", lambda: 0.0125)
        )

    def test_adapter_calls_adaptee(self):
        client: PaymentClient = self.cont.instance(PaymentClient)
        client.charge("order-123", 5000)

        assert self.stripe_sdk.pay.call_count == 1
        assert self.stripe_sdk.pay.call_args[0][0] == 0.0125 * 5000
        assert self.stripe_sdk.pay.call_args[1]["reference"] == "order-123"

        assert self.logger.info.call_args[0][0] == Contains("stripe sdk")

    def test_adapter_is_shared_singleton(self):
        assert self.cont.instance(PaymentClient) is self.cont.instance(PaymentClient)


class TestSwappingAdapterImplementation(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.cont.bind(PaymentClient, StripeAdapter, dependencies=[StripeSdk, InfoLogger])
        self.cont.bind(StripeSdk, StripeSdk)
        self.cont.bind(InfoLogger, NullLogger)

    def test_adapter_uses_default_rate(self):
        client: PaymentClient = self.cont.instance(PaymentClient)
        client.charge("order-123", 5000)

    def test_rebinding_sdk_swaps_adaptee(self):
        failing = MagicMock(spec=StripeSdk)
        failing.pay.return_value = False
        self.cont.factory(StripeSdk, lambda: failing)
        self.cont.bind(PaymentClient, StripeAdapter, dependencies=[StripeSdk, InfoLogger])

        client: PaymentClient = self.cont.instance(PaymentClient)

        with self.assertRaises(RuntimeError):
            client.charge("order-123", 5000)
        failing.pay.assert_called_once()
