# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session-token lifecycle core of the HotelHub review platform."""

__version__ = "0.1.0"
