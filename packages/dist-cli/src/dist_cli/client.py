# SPDX-License-Identifier: MIT
"""Release registry client.

Talks JSON:API to the registry: upserts release metadata and obtains the
upload target for the release artifact. Transport errors are not retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from dist_integrity import ReleaseDescriptor

from .config import DEFAULT_API_URL

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class APIError(Exception):
    """A structured error returned by the registry.

    Attributes:
        code: Registry error code (``API_ERROR`` when the registry sent none)
        title: Short summary
        detail: Longer explanation
        status_code: HTTP status of the response
    """

    def __init__(
        self,
        code: str,
        title: str,
        detail: str,
        status_code: Optional[int] = None,
    ):
        self.code = code or "API_ERROR"
        self.title = title
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{self.code} - {self.title}: {self.detail}")


@dataclass(frozen=True)
class UploadTarget:
    """Where the artifact bytes go. Used exactly once."""

    url: str


@dataclass(frozen=True)
class Release:
    """A release as recorded by the registry."""

    id: str
    upload_target: UploadTarget
    attributes: dict[str, Any] = field(default_factory=dict)


def _api_error(response: httpx.Response) -> Optional[APIError]:
    """Extract the first JSON:API error from ``response``, if it has one."""
    try:
        document = response.json()
    except ValueError:
        return None

    errors = document.get("errors") if isinstance(document, dict) else None
    if not errors or not isinstance(errors[0], dict):
        return None

    error = errors[0]
    return APIError(
        code=error.get("code") or "",
        title=error.get("title") or "",
        detail=error.get("detail") or "",
        status_code=response.status_code,
    )


def _invalid_response(response: httpx.Response, detail: str) -> APIError:
    return APIError("", "Invalid response", detail, status_code=response.status_code)


class RegistryClient:
    """Client for the release registry of one account.

    Args:
        account: Account identifier
        token: Product token
        base_url: Registry base URL, e.g. ``https://api.keygen.sh/v1``
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        account: str,
        token: str,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.account = account
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": JSONAPI_MEDIA_TYPE,
                "Content-Type": JSONAPI_MEDIA_TYPE,
            },
            timeout=timeout,
            transport=transport,
        )

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, "accounts", self.account, *parts])

    def _data(self, response: httpx.Response) -> dict[str, Any]:
        """Return the primary ``data`` object of a successful response."""
        if not response.is_success:
            error = _api_error(response)
            if error is not None:
                raise error
            response.raise_for_status()

        if not response.content:
            return {}
        try:
            document = response.json()
        except ValueError:
            raise _invalid_response(response, "registry did not return JSON") from None
        if not isinstance(document, dict):
            raise _invalid_response(response, "registry did not return a JSON:API document")

        data = document.get("data")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise _invalid_response(response, "registry returned a malformed data object")
        return data

    def upsert_release(self, descriptor: ReleaseDescriptor) -> Release:
        """Create or update the release described by ``descriptor``.

        Returns:
            The registered release with its upload target

        Raises:
            APIError: If the registry rejects the release or its reply is
                not a JSON:API document
            httpx.HTTPError: On transport failures or unstructured errors
        """
        response = self._client.put(self._url("releases"), json=descriptor.to_payload())
        data = self._data(response)
        release_id = data.get("id")
        if not release_id or not isinstance(release_id, str):
            raise _invalid_response(response, "registry did not return a release id")

        attributes = data.get("attributes")
        logger.debug("upserted release %s (%s)", release_id, descriptor.version)
        return Release(
            id=release_id,
            upload_target=self._upload_target(release_id),
            attributes=attributes if isinstance(attributes, dict) else {},
        )

    def _upload_target(self, release_id: str) -> UploadTarget:
        url = self._url("releases", release_id, "artifact")
        response = self._client.put(url, follow_redirects=False)

        if response.is_redirect:
            location = response.headers["Location"]
            logger.debug("artifact upload redirected for release %s", release_id)
            return UploadTarget(url=location)

        links = self._data(response).get("links")
        redirect = links.get("redirect") if isinstance(links, dict) else None
        return UploadTarget(url=redirect or url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
