import logging
from typing import Dict

import requests

from contact_cli.utils import Config, SubmitResult

logger = logging.getLogger(__name__)


# ========== Relay HTTP client ==========
class HttpClient:
    def __init__(self, cfg: Config, session: requests.Session = None):
        self.cfg = cfg
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def post_form(self, fields: Dict[str, str]) -> SubmitResult:
        """
        POST ``fields`` to the relay as multipart/form-data.

        Never raises for transport problems: an unreachable host, a TLS
        failure or a body that is not a JSON object all come back as a
        result with ``ok=False``.
        """
        # (None, value) parts keep requests from adding filenames
        parts = {key: (None, value) for key, value in fields.items()}
        kwargs = {"files": parts, "verify": self.cfg.verify_tls}
        if self.cfg.timeout:
            kwargs["timeout"] = self.cfg.timeout

        try:
            resp = self.session.post(self.cfg.endpoint, **kwargs)
        except requests.RequestException as e:
            logger.warning("Relay request failed: %s", e.__class__.__name__)
            return SubmitResult(ok=False, status_code=None, text="", error=str(e))

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Relay answered %s with a non-JSON body", resp.status_code)
            return SubmitResult(ok=False, status_code=resp.status_code, text=resp.text, error=str(e))

        if not isinstance(data, dict):
            return SubmitResult(ok=False, status_code=resp.status_code, text=resp.text,
                                error="Unexpected response shape")

        logger.debug("Relay answered %s: %s", resp.status_code, resp.text)
        return SubmitResult(ok=True, status_code=resp.status_code, text=resp.text, data=data)

    def close(self):
        self.session.close()
