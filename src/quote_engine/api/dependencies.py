# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies shared by the quote endpoints."""

from beartype import beartype

from ..services.date_converter import DateToAgeBandConverter


@beartype
def get_date_converter() -> DateToAgeBandConverter:
    """Birth date converter using today's date."""
    return DateToAgeBandConverter()
