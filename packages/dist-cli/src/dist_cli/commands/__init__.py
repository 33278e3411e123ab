# SPDX-License-Identifier: MIT
"""CLI commands."""
