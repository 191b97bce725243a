"""Bounded retry with exponential backoff for remote generation calls."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .generation_client import GenerationError, TransientGenerationError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2
INITIAL_DELAY_SECONDS = 1.0
OVERLOADED_MESSAGE = "AI sedang sibuk (overloaded). Mohon coba lagi beberapa saat."


class GenerationCancelled(GenerationError):
    """Raised when the caller abandons a generation before it finishes."""


def with_retry(
    operation: Callable[[], T],
    label: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    *,
    initial_delay: float = INITIAL_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    cancel_event: Optional[threading.Event] = None,
) -> T:
    """Run ``operation`` and retry it while the service reports an overload.

    The operation runs at most ``max_retries + 1`` times. Waits start at
    ``initial_delay`` seconds and double after every retry. Every failure
    that escapes is a :class:`GenerationError` carrying ``label``.
    """

    def check_cancelled(retry_state: RetryCallState) -> None:
        _raise_if_cancelled(cancel_event, label)

    def before_sleep(retry_state: RetryCallState) -> None:
        _raise_if_cancelled(cancel_event, label)
        LOGGER.info(
            "Model overloaded for '%s'. Retrying in %.1fs (attempt %d of %d)",
            label,
            retry_state.next_action.sleep,
            retry_state.attempt_number + 1,
            max_retries + 1,
        )

    retrying = Retrying(
        retry=retry_if_exception_type(TransientGenerationError),
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=initial_delay),
        sleep=sleep,
        before=check_cancelled,
        before_sleep=before_sleep,
        reraise=True,
    )

    try:
        return retrying(operation)
    except TransientGenerationError as exc:
        LOGGER.warning("Giving up on '%s' after %d attempts: %s", label, max_retries + 1, exc)
        raise GenerationError(OVERLOADED_MESSAGE, label=label, transient=True) from exc
    except GenerationCancelled:
        raise
    except Exception as exc:
        LOGGER.error("Error during '%s': %s", label, exc)
        detail = str(exc).strip() or exc.__class__.__name__
        raise GenerationError(f"Gagal saat memproses {label}: {detail}", label=label) from exc


def _raise_if_cancelled(cancel_event: Optional[threading.Event], label: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise GenerationCancelled(f"Proses {label} dibatalkan.", label=label)
