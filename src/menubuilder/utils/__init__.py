"""Utility functions for menubuilder."""

from menubuilder.utils.money import amounts_equal, format_money, parse_amount, round_cents

__all__ = ["parse_amount", "format_money", "round_cents", "amounts_equal"]
