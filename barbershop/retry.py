# barbershop/retry.py

import time
import random
import logging
from typing import Callable, Tuple, Type

logger = logging.getLogger(__name__)


class RetryPolicy:
    """
    Bounded retries with a delay between attempts.

    - retry_limit: retries allowed after the first attempt
    - backoff: 'fixed', 'exponential' or 'jitter'
    - base_delay: delay in seconds before the first retry
    - retry_on: exception types worth retrying; anything else propagates
    """

    def __init__(
        self,
        retry_limit: int = 3,
        backoff: str = "exponential",
        base_delay: float = 0.2,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.retry_limit = retry_limit
        self.backoff = backoff
        self.base_delay = base_delay
        self.retry_on = retry_on
        self.sleep = sleep

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.retry_limit

    def get_delay(self, attempt: int) -> float:
        if self.backoff == "fixed":
            return self.base_delay
        elif self.backoff == "exponential":
            return self.base_delay * (2 ** attempt)
        elif self.backoff == "jitter":
            return self.base_delay * random.uniform(1, 2 ** attempt)
        else:
            return 0.0


def retry_with_policy(policy: RetryPolicy, func, *args, **kwargs):
    """
    Calls ``func`` until it succeeds or the policy gives up, in which case
    the last exception is re-raised.
    """
    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except policy.retry_on as e:
            if not policy.should_retry(attempt):
                logger.error("Giving up after %d attempts: %s", attempt + 1, e)
                raise
            delay = policy.get_delay(attempt)
            logger.warning("Retry #%d in %.2fs due to: %s", attempt + 1, delay, e)
            policy.sleep(delay)
            attempt += 1
