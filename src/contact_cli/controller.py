import logging
import re
from enum import Enum
from typing import Callable, Optional

from contact_cli.utils import (
    Config, FormFields, FormPayload, SubmitResult,
    SubmissionError, ConfigurationError, ValidationError,
    REQUIRED_FIELDS, looks_like_email,
)

logger = logging.getLogger(__name__)

CONFIG_ERROR = "Configuration error. Contact the site owner."
REQUIRED_ERROR = "Please fill in all required fields."
EMAIL_ERROR = "Please enter a valid email address."
NETWORK_ERROR = "Network error. Check your connection."
GENERIC_ERROR = "Something went wrong. Please try again."

MAX_REMOTE_MESSAGE = 200

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


StateListener = Callable[[SubmissionState, Optional[str]], None]


def clean_remote_message(raw) -> Optional[str]:
    """Relay messages are displayed verbatim, so keep them to one short plain line."""
    if not isinstance(raw, str):
        return None
    text = " ".join(_CONTROL_CHARS.sub(" ", raw).split())
    if not text:
        return None
    if len(text) > MAX_REMOTE_MESSAGE:
        text = text[:MAX_REMOTE_MESSAGE - 1].rstrip() + "…"
    return text


# ========== Submission state machine ==========
class SubmissionController:
    """
    Owns the status of one contact form.

    ``idle -> submitting -> success | error``; from success or error another
    submit starts over. Every failure (missing credential, empty fields,
    unreachable relay, relay rejection) lands in ``error`` with a message
    meant for display instead of being raised.
    """

    def __init__(self, cfg: Config, http, on_change: Optional[StateListener] = None):
        self.cfg = cfg
        self.http = http
        self.on_change = on_change
        self.fields = FormFields()
        self.state = SubmissionState.IDLE
        self.error_message: Optional[str] = None
        self.last_result: Optional[SubmitResult] = None

    @property
    def is_submitting(self) -> bool:
        return self.state is SubmissionState.SUBMITTING

    def submit(self, fields: Optional[FormFields] = None) -> SubmissionState:
        if self.is_submitting:
            logger.warning("Submit ignored, a submission is already in flight")
            return self.state
        if fields is not None:
            self.fields = fields
        self.last_result = None

        try:
            payload = self._validate()
        except SubmissionError as e:
            self._transition(SubmissionState.ERROR, str(e))
            return self.state

        self._transition(SubmissionState.SUBMITTING)
        try:
            result = self.http.post_form(payload.to_form())
        except Exception:
            # submitting must never be left as the resting state
            logger.exception("Relay client failed unexpectedly")
            self._transition(SubmissionState.ERROR, NETWORK_ERROR)
            return self.state
        self.last_result = result
        self._apply_result(result)
        return self.state

    def reset(self):
        self.fields.clear()
        self._transition(SubmissionState.IDLE)

    # ========== Internal helpers ==========
    def _validate(self) -> FormPayload:
        if not self.cfg.has_access_key:
            raise ConfigurationError(CONFIG_ERROR)
        for name in REQUIRED_FIELDS:
            if not (getattr(self.fields, name) or "").strip():
                raise ValidationError(REQUIRED_ERROR)
        if not looks_like_email(self.fields.email.strip()):
            raise ValidationError(EMAIL_ERROR)
        return FormPayload.build(self.fields, self.cfg.access_key)

    def _apply_result(self, result: SubmitResult):
        if not result.ok or result.data is None:
            self._transition(SubmissionState.ERROR, NETWORK_ERROR)
        elif result.data.get("success"):
            self.fields.clear()
            self._transition(SubmissionState.SUCCESS)
        else:
            message = clean_remote_message(result.data.get("message")) or GENERIC_ERROR
            self._transition(SubmissionState.ERROR, message)

    def _transition(self, state: SubmissionState, message: Optional[str] = None):
        logger.debug("Form state %s -> %s", self.state.value, state.value)
        self.state = state
        self.error_message = message if state is SubmissionState.ERROR else None
        if self.on_change:
            self.on_change(state, self.error_message)
