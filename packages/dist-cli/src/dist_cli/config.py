# SPDX-License-Identifier: MIT
"""Immutable configuration for a dist invocation.

Option values arrive from click already merged in the order explicit flag,
then environment variable, then default. :class:`DistConfig` freezes that
result once at startup; nothing downstream reads the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from dist_integrity import ReleaseOptions

DEFAULT_API_URL = "https://api.keygen.sh/v1"

ENV_ACCOUNT = "DIST_ACCOUNT_ID"
ENV_PRODUCT = "DIST_PRODUCT_ID"
ENV_TOKEN = "DIST_PRODUCT_TOKEN"
ENV_SIGNING_KEY_PATH = "DIST_SIGNING_KEY_PATH"
ENV_SIGNING_KEY = "DIST_SIGNING_KEY"
ENV_API_URL = "DIST_API_URL"


class ConfigError(Exception):
    """Raised when required configuration is missing or inconsistent."""

    pass


@dataclass(frozen=True)
class DistConfig:
    """Resolved settings for publishing one artifact.

    Attributes:
        path: Artifact path as given on the command line
        account: Registry account identifier
        product: Product identifier, also the signing context
        token: Product token for the registry
        api_url: Registry base URL
        release: Release inputs for the descriptor builder
        dry_run: Build and print the descriptor without network calls
    """

    path: str
    account: str
    product: str
    token: str
    release: ReleaseOptions
    api_url: str = DEFAULT_API_URL
    dry_run: bool = False

    @classmethod
    def from_options(
        cls,
        *,
        path: str,
        version: str,
        account: Optional[str] = None,
        product: Optional[str] = None,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        filename: Optional[str] = None,
        filetype: str = "auto",
        name: Optional[str] = None,
        description: Optional[str] = None,
        platform: Optional[str] = None,
        channel: str = "stable",
        checksum: Optional[str] = None,
        signature: Optional[str] = None,
        signing_algorithm: str = "ed25519ph",
        signing_key_path: Optional[str] = None,
        signing_key: Optional[str] = None,
        entitlements: Iterable[str] = (),
        dry_run: bool = False,
    ) -> "DistConfig":
        """Validate presence of required settings and freeze them.

        Raises:
            ConfigError: If the product, or (outside a dry run) the account
                or token, is missing
        """
        if not product:
            raise ConfigError(f"Product required. Provide --product or set {ENV_PRODUCT}.")

        if not dry_run:
            if not account:
                raise ConfigError(f"Account required. Provide --account or set {ENV_ACCOUNT}.")
            if not token:
                raise ConfigError(
                    f"Authentication required. Provide --token or set {ENV_TOKEN} "
                    "environment variable."
                )

        release = ReleaseOptions(
            version=version,
            filename=filename or None,
            filetype=filetype,
            name=name or None,
            description=description or None,
            platform=platform or None,
            channel=channel,
            checksum=checksum or None,
            signature=signature or None,
            signing_key_path=signing_key_path or None,
            signing_key=signing_key or None,
            signing_algorithm=signing_algorithm,
            entitlements=tuple(entitlements),
        )

        return cls(
            path=path,
            account=account or "",
            product=product,
            token=token or "",
            release=release,
            api_url=(api_url or DEFAULT_API_URL).rstrip("/"),
            dry_run=dry_run,
        )
