import json
from typing import Mapping

import requests

from retrain_notifier.core.errors import NotifyError


class Notifier:
    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def notify(self, snapshot: Mapping[str, float]) -> None:
        """
        POST the metrics snapshot to the configured endpoint as a JSON object.
        Any failure is raised as NotifyError; nothing is retried.
        """
        try:
            body = json.dumps(dict(snapshot), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise NotifyError(f"Could not serialize metrics: {e}") from e

        try:
            resp = requests.post(
                self.url,
                data=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise NotifyError(f"Notifier unreachable: {str(e)}") from e

        if not 200 <= resp.status_code < 300:
            raise NotifyError(f"Notifier returned {resp.status_code}: {resp.text[:200]}")
