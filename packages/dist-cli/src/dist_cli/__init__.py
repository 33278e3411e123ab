# SPDX-License-Identifier: MIT
"""Command line publishing of release artifacts.

Registers release metadata with the registry and streams the artifact to
its upload target, with a progress bar on interactive terminals.
"""

__version__ = "0.1.0"

from .client import APIError, RegistryClient, Release, UploadTarget
from .config import ConfigError, DistConfig
from .progress import ProgressReader, TransferProgress, should_show_progress
from .publish import prepare_release, publish_release
from .upload import DEFAULT_BUFFER_SIZE, upload_artifact

__all__ = [
    "APIError",
    "RegistryClient",
    "Release",
    "UploadTarget",
    "ConfigError",
    "DistConfig",
    "ProgressReader",
    "TransferProgress",
    "should_show_progress",
    "prepare_release",
    "publish_release",
    "DEFAULT_BUFFER_SIZE",
    "upload_artifact",
]
