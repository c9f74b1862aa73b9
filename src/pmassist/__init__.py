# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""pmassist: LLM completion client for the project-management assistant."""

__version__ = "0.1.0"
