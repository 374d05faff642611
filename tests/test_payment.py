import random

import pytest

from errors import InvalidArgument, PaymentFailed
from payment import PaymentSimulator


class TestPaymentSimulator:
    def test_approves_and_issues_reference(self):
        simulator = PaymentSimulator(success_rate=1.0, delay=0, rng=random.Random(1))

        result = simulator.process(990.0)

        assert result.success is True
        assert result.amount == 990.0
        assert result.payment_id.startswith("pay_")
        assert len(result.payment_id.split("_")[-1]) == 9
        assert result.message == "Payment processed successfully"

    def test_references_are_unique(self):
        simulator = PaymentSimulator(success_rate=1.0, delay=0, rng=random.Random(1))
        assert simulator.process(10).payment_id != simulator.process(10).payment_id

    def test_declines(self):
        simulator = PaymentSimulator(success_rate=0.0, delay=0)
        with pytest.raises(PaymentFailed):
            simulator.process(10)

    def test_waits_for_configured_delay(self):
        waited = []
        simulator = PaymentSimulator(success_rate=1.0, delay=2.0, sleep=waited.append)

        simulator.process(10)

        assert waited == [2.0]

    def test_success_rate_is_roughly_honoured(self):
        simulator = PaymentSimulator(success_rate=0.95, delay=0, rng=random.Random(42))
        approved = 0
        for _ in range(1000):
            try:
                simulator.process(1)
                approved += 1
            except PaymentFailed:
                pass
        assert 920 <= approved <= 980

    @pytest.mark.parametrize("amount", [None, -1])
    def test_invalid_amount(self, amount):
        simulator = PaymentSimulator(success_rate=1.0, delay=0)
        with pytest.raises(InvalidArgument):
            simulator.process(amount)
