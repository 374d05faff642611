"""Simulated payment gateway: approves most payments after a fixed delay."""
import os
import random
import time
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from errors import InvalidArgument, PaymentFailed
from utils import make_reference

logger = structlog.get_logger(__name__)

PAYMENT_SUCCESS_RATE = float(os.getenv("PAYMENT_SUCCESS_RATE", "0.95"))
PAYMENT_DELAY_SECONDS = float(os.getenv("PAYMENT_DELAY_SECONDS", "2"))


class PaymentResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    payment_id: str = Field(..., alias="paymentId")
    amount: float
    message: str


class PaymentSimulator:
    def __init__(
        self,
        success_rate: float = PAYMENT_SUCCESS_RATE,
        delay: float = PAYMENT_DELAY_SECONDS,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.success_rate = success_rate
        self.delay = delay
        self.rng = rng or random.Random()
        self.sleep = sleep

    def process(self, amount) -> PaymentResult:
        if amount is None or isinstance(amount, bool) or amount < 0:
            raise InvalidArgument("Invalid payment amount")

        if self.delay > 0:
            self.sleep(self.delay)

        if self.rng.random() >= self.success_rate:
            logger.warning("Payment declined", amount=amount)
            raise PaymentFailed("Payment failed. Please try again.")

        result = PaymentResult(
            success=True,
            payment_id=make_reference("pay", self.rng),
            amount=amount,
            message="Payment processed successfully",
        )
        logger.info("Payment approved", payment_id=result.payment_id, amount=amount)
        return result


_simulator = PaymentSimulator()


def get_payment_simulator() -> PaymentSimulator:
    """FastAPI dependency; tests override it with a deterministic simulator."""
    return _simulator
