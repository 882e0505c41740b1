import os
import re
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

RELAY_ENDPOINT = "https://api.web3forms.com/submit"
ACCESS_KEY_ENV = "WEB3FORMS_ACCESS_KEY"

REQUIRED_FIELDS = ("name", "email", "message")

_EMAIL_SHAPE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ========== Errors ==========
class SubmissionError(Exception):
    """Raised by validation; the message is shown to the user as-is."""


class ConfigurationError(SubmissionError):
    pass


class ValidationError(SubmissionError):
    pass


# ========== Config & Models ==========
@dataclass
class Config:
    access_key: Optional[str] = None
    endpoint: str = RELAY_ENDPOINT
    timeout: Optional[int] = None
    verify_tls: bool = True
    debug: bool = False
    theme: str = "light"

    @classmethod
    def init_from_args(cls, args, store=None) -> "Config":
        return cls(
            access_key=resolve_access_key(getattr(args, "access_key", None), store),
            endpoint=getattr(args, "endpoint", None) or RELAY_ENDPOINT,
            timeout=getattr(args, "timeout", None),
            verify_tls=not getattr(args, "insecure", False),
            debug=bool(getattr(args, "debug", False)),
            theme=getattr(args, "theme", None) or "light",
        )

    @property
    def has_access_key(self) -> bool:
        return bool(self.access_key and self.access_key.strip())


@dataclass
class FormFields:
    """Values currently typed into the form, owned by the view."""
    name: str = ""
    email: str = ""
    message: str = ""

    def clear(self):
        self.name = ""
        self.email = ""
        self.message = ""

    def is_empty(self) -> bool:
        return not (self.name or self.email or self.message)


@dataclass(frozen=True)
class FormPayload:
    name: str
    email: str
    message: str
    access_key: str
    botcheck: str = ""

    @classmethod
    def build(cls, fields: FormFields, access_key: str) -> "FormPayload":
        # honeypot is always sent empty, the relay decides what a filled one means
        return cls(
            name=fields.name.strip(),
            email=fields.email.strip(),
            message=fields.message.strip(),
            access_key=access_key.strip(),
        )

    def to_form(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "access_key": self.access_key,
            "botcheck": self.botcheck,
        }


@dataclass
class SubmitResult:
    ok: bool
    status_code: Optional[int]
    text: str
    data: Optional[Dict[str, Any]] = field(default=None)
    error: Optional[str] = None


# ========== Helpers ==========
def resolve_access_key(cli_value: Optional[str] = None, store=None) -> Optional[str]:
    """
    Pick the relay credential: command line first, then the environment
    (a local .env is honoured), then whatever ``store`` has saved.
    """
    if cli_value and cli_value.strip():
        return cli_value.strip()

    load_dotenv(find_dotenv(usecwd=True))
    env_value = os.environ.get(ACCESS_KEY_ENV, "")
    if env_value.strip():
        return env_value.strip()

    if store is not None:
        stored = store.load()
        if stored and stored.strip():
            return stored.strip()
    return None


def looks_like_email(value: str) -> bool:
    return bool(_EMAIL_SHAPE.match(value or ""))


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"
