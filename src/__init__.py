# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""StayLedger: booking service for a property-rental marketplace."""

__version__ = "0.1.0"
