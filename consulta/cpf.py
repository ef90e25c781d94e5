"""
cpf.py - CPF Normalization and Input Mask
==========================================
Helpers for the CPF (Cadastro de Pessoas Físicas) number used as the lookup key.

A CPF is 11 digits. Users type it with or without the usual mask
("000.000.000-00"), and the spreadsheet may store it either way, so every
comparison is done on the digits-only form.

Examples:
---------
    normalize("111.222.333-44")   -> "11122233344"
    format_cpf("11122233344")     -> "111.222.333-44"
    format_cpf("1112")            -> "111.2"
    is_valid_key("12345")         -> False
"""

import re


# Number of digits in a CPF
CPF_LENGTH = 11

# Length of a fully masked CPF ("000.000.000-00"), used as input max length
MASKED_LENGTH = 14

_NON_DIGITS = re.compile(r"\D")


class InvalidCPFError(ValueError):
    """Raised when a search key does not reduce to exactly 11 digits."""


def normalize(value: str | None) -> str:
    """
    Strip every non-digit character from a CPF.

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    return _NON_DIGITS.sub("", value or "")


# Removing the mask is the same operation, kept under the name the form uses
deformat = normalize


def is_valid_key(value: str | None) -> bool:
    """True if the value reduces to exactly 11 digits."""
    return len(normalize(value)) == CPF_LENGTH


def require_valid(value: str | None) -> str:
    """
    Return the normalized key, or raise InvalidCPFError.

    This is the precondition checked before any lookup is dispatched.
    """
    digits = normalize(value)
    if len(digits) != CPF_LENGTH:
        raise InvalidCPFError(
            f"CPF must have {CPF_LENGTH} digits, got {len(digits)}"
        )
    return digits


def format_cpf(value: str) -> str:
    """
    Apply the "000.000.000-00" mask progressively, as the user types.

    Digits are grouped 3.3.3-2 as far as they go. Input with more than
    11 digits is returned unchanged so the field never silently drops digits.

    Examples:
        format_cpf("123")          -> "123"
        format_cpf("1234")         -> "123.4"
        format_cpf("1234567")      -> "123.456.7"
        format_cpf("1234567890")   -> "123.456.789-0"
        format_cpf("12345678901")  -> "123.456.789-01"
    """
    digits = normalize(value)
    if len(digits) > CPF_LENGTH:
        return value

    # Split into the 3/3/3/2 groups, dropping the empty trailing ones
    groups = [digits[0:3], digits[3:6], digits[6:9], digits[9:11]]
    head = ".".join(g for g in groups[:3] if g)
    if groups[3]:
        return f"{head}-{groups[3]}"
    return head
