"""HTTP client asking the instrumented page to evaluate an expression."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .exceptions import ExpressionClientError

logger = logging.getLogger(__name__)

DEFAULT_EXPRESSION_PARAMETER = "__renderlens-debugger-expression"
DEFAULT_ARRAY_PATH_PARAMETER = "__renderlens-debugger-currentArrayPath"


class ExpressionClient:
    """Posts expressions back to the page URL the trace was recorded on."""

    def __init__(
        self,
        timeout_s: float = 10.0,
        expression_parameter: str = DEFAULT_EXPRESSION_PARAMETER,
        array_path_parameter: str = DEFAULT_ARRAY_PATH_PARAMETER,
    ) -> None:
        self._timeout_s = timeout_s
        self._expression_parameter = expression_parameter
        self._array_path_parameter = array_path_parameter

    def evaluate(self, page_url: str, expression: str, array_path: str) -> Any:
        """Return the decoded JSON result of ``expression`` at ``array_path``."""
        form = {
            self._expression_parameter: expression,
            self._array_path_parameter: array_path,
        }
        try:
            response = requests.post(page_url, data=form, timeout=self._timeout_s)
        except requests.RequestException as exc:
            logger.warning("Expression request to %s failed: %s", page_url, exc)
            raise ExpressionClientError(f"Request to {page_url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise ExpressionClientError(
                f"Expression request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ExpressionClientError("Expression response is not JSON") from exc
