# SPDX-License-Identifier: MIT
"""Publish a new release for a product."""

from __future__ import annotations

import json
from typing import Optional

import click
import httpx

from dist_integrity import CHANNELS, DistError, SigningAlgorithm

from ..client import APIError
from ..config import (
    ENV_ACCOUNT,
    ENV_API_URL,
    ENV_PRODUCT,
    ENV_SIGNING_KEY,
    ENV_SIGNING_KEY_PATH,
    ENV_TOKEN,
    ConfigError,
    DistConfig,
)
from ..main import Context, echo_error, echo_info, echo_success, echo_warning, pass_context
from ..progress import should_show_progress
from ..publish import prepare_release, publish_release


def _first_line(error: Exception) -> str:
    message = str(error).strip()
    return message.splitlines()[0] if message else type(error).__name__


@click.command()
@click.argument("path")
@click.option(
    "--account",
    envvar=ENV_ACCOUNT,
    help=f"Registry account identifier [${ENV_ACCOUNT}].",
)
@click.option(
    "--product",
    envvar=ENV_PRODUCT,
    help=f"Product identifier, also the signing context [${ENV_PRODUCT}].",
)
@click.option(
    "--token",
    envvar=ENV_TOKEN,
    help=f"Product token [${ENV_TOKEN}].",
)
@click.option(
    "--api-url",
    envvar=ENV_API_URL,
    help=f"Registry base URL [${ENV_API_URL}].",
)
@click.option(
    "--filename",
    help="Filename for the release (defaults to the basename of PATH).",
)
@click.option(
    "--filetype",
    default="auto",
    show_default=True,
    help="Filetype for the release ('auto' derives it from the filename).",
)
@click.option(
    "--version",
    "version",
    required=True,
    help="Version for the release (semantic version).",
)
@click.option("--name", help="Human-readable name for the release.")
@click.option("--description", help="Description for the release (e.g. release notes).")
@click.option("--platform", help="Platform for the release, e.g. linux/amd64.")
@click.option(
    "--channel",
    type=click.Choice(CHANNELS),
    default="stable",
    show_default=True,
    help="Channel for the release.",
)
@click.option("--signature", help="Pre-calculated signature for the release.")
@click.option("--checksum", help="Pre-calculated SHA-512 checksum for the release.")
@click.option(
    "--signing-algorithm",
    type=click.Choice([algorithm.value for algorithm in SigningAlgorithm]),
    default=SigningAlgorithm.ED25519PH.value,
    show_default=True,
    help="Signing algorithm to use.",
)
@click.option(
    "--signing-key",
    "signing_key_path",
    envvar=ENV_SIGNING_KEY_PATH,
    help=f"Path to a hex-encoded Ed25519 private key [${ENV_SIGNING_KEY_PATH}].",
)
@click.option(
    "--signing-key-hex",
    "signing_key",
    envvar=ENV_SIGNING_KEY,
    help=f"Inline hex-encoded Ed25519 private key; prefer ${ENV_SIGNING_KEY}.",
)
@click.option(
    "--entitlements",
    multiple=True,
    help="Comma-separated entitlement constraints (e.g. --entitlements <id>,<id>).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the release payload without registering or uploading.",
)
@pass_context
def dist(
    ctx: Context,
    path: str,
    account: Optional[str],
    product: Optional[str],
    token: Optional[str],
    api_url: Optional[str],
    filename: Optional[str],
    filetype: str,
    version: str,
    name: Optional[str],
    description: Optional[str],
    platform: Optional[str],
    channel: str,
    signature: Optional[str],
    checksum: Optional[str],
    signing_algorithm: str,
    signing_key_path: Optional[str],
    signing_key: Optional[str],
    entitlements: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Publish a new release for a product.

    Computes the checksum (and a signature when a signing key is given) of
    PATH, registers the release, then uploads the file.

    \b
    Examples:
        dist dist build/my-program-1-0-0 \\
            --signing-key ~/.keys/dist.key \\
            --account '1fddcec8-8dd3-4d8d-9b16-215cac0f9b52' \\
            --product '2313b7e7-1ea6-4a01-901e-2931de6bb1e2' \\
            --token 'prod-xxx' \\
            --platform 'linux/amd64' \\
            --version '1.0.0'
    """
    try:
        config = DistConfig.from_options(
            path=path,
            version=version,
            account=account,
            product=product,
            token=token,
            api_url=api_url,
            filename=filename,
            filetype=filetype,
            name=name,
            description=description,
            platform=platform,
            channel=channel,
            checksum=checksum,
            signature=signature,
            signing_algorithm=signing_algorithm,
            signing_key_path=signing_key_path,
            signing_key=signing_key,
            entitlements=entitlements,
            dry_run=dry_run,
        )
    except ConfigError as e:
        echo_error(str(e))
        raise SystemExit(1) from e

    if config.dry_run:
        try:
            descriptor = prepare_release(config)
        except DistError as e:
            echo_error(str(e))
            raise SystemExit(1) from e
        except OSError as e:
            echo_error(f'path "{path}" is not readable ({_first_line(e)})')
            raise SystemExit(1) from e

        echo_warning("Dry run - release payload:")
        echo_info(json.dumps(descriptor.to_payload(), indent=2))
        echo_success("Dry run complete. Nothing was registered or uploaded.")
        return

    try:
        release = publish_release(config, show_progress=should_show_progress())
    except (DistError, APIError) as e:
        echo_error(str(e))
        raise SystemExit(1) from e
    except httpx.HTTPError as e:
        echo_error(_first_line(e))
        raise SystemExit(1) from e
    except OSError as e:
        echo_error(f'path "{path}" is not readable ({_first_line(e)})')
        raise SystemExit(1) from e

    echo_success("published release " + click.style(release.id, italic=True))
