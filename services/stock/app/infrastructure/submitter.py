"""HTTP client for the service that commits transactions against live stock."""

from typing import Optional, Protocol

import httpx

from app.application.draft import TransactionSubmission
from app.domain.errors import StaleSnapshotConflict, SubmissionError
from shared.core import get_logger

logger = get_logger(__name__)


class TransactionSubmitter(Protocol):
    def submit(self, submission: TransactionSubmission) -> dict:
        ...


class HttpTransactionSubmitter:
    """
    Posts a finalized transaction to the downstream transactions service.

    The remote side re-validates against live stock; a 409 from it means the
    quantities this service computed from are out of date.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self._transport = transport

    def _url(self, submission: TransactionSubmission) -> str:
        return f"{self.base_url}/transactions/{submission.kind.value}s"

    def submit(self, submission: TransactionSubmission) -> dict:
        url = self._url(submission)
        try:
            # Retries cover connection attempts only; a request that reached the server is never replayed
            transport = self._transport or httpx.HTTPTransport(retries=self.retries)
            with httpx.Client(timeout=self.timeout, transport=transport) as client:
                response = client.post(url, json=submission.to_dict())
        except httpx.HTTPError as e:
            logger.error(f"Transaction submission to {url} failed: {e}")
            raise SubmissionError(f"Transaction service unreachable: {e}") from e

        if response.status_code == 409:
            detail = _detail(response)
            logger.warning(
                "Transaction rejected: stock changed since preview",
                extra={'extra_fields': {'url': url, 'detail': detail}}
            )
            raise StaleSnapshotConflict("Stock changed since the summary was computed", 409, detail)
        if response.status_code >= 400:
            detail = _detail(response)
            logger.error(
                f"Transaction service returned {response.status_code}",
                extra={'extra_fields': {'url': url, 'detail': detail}}
            )
            raise SubmissionError(
                f"Transaction service returned {response.status_code}", response.status_code, detail
            )
        return _receipt(response)


def _receipt(response: httpx.Response) -> dict:
    """The downstream service has recorded the transaction; never fail on its reply body"""
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {"body": response.text}
    if isinstance(body, dict):
        return body
    return {"receipt": body}


def _detail(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body
