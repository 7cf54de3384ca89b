from __future__ import annotations

import random
import re
import secrets
import string
import time

FALLBACK_PREFIX = "TOUR"
PREFIX_SOURCE_LENGTH = 4
SUFFIX_NUMBER_MIN = 1000
SUFFIX_NUMBER_MAX = 9999
SUFFIX_LETTERS_LENGTH = 2
FALLBACK_TIMESTAMP_DIGITS = 8

REGISTRATION_CODE_RE = re.compile(r"^[A-Z]{1,4}-\d{4}[A-Z]{2}$")
FALLBACK_REGISTRATION_CODE_RE = re.compile(r"^TOUR-\d{8}$")

_NON_LETTER_RE = re.compile(r"[^A-Z]")
_SYSTEM_RANDOM = secrets.SystemRandom()


def derive_code_prefix(seed: str | None) -> str:
    """Builds the memorable part of a code from the tournament's game name.

    Only the first four characters of the seed are considered; whatever is
    left after dropping non A-Z characters becomes the prefix.
    """
    head = (seed or "")[:PREFIX_SOURCE_LENGTH].upper()
    prefix = _NON_LETTER_RE.sub("", head)
    return prefix or FALLBACK_PREFIX


def generate_registration_code(seed: str | None, *, rng: random.Random | None = None) -> str:
    chooser = rng or _SYSTEM_RANDOM
    number = chooser.randint(SUFFIX_NUMBER_MIN, SUFFIX_NUMBER_MAX)
    letters = "".join(
        chooser.choice(string.ascii_uppercase) for _ in range(SUFFIX_LETTERS_LENGTH)
    )
    return f"{derive_code_prefix(seed)}-{number}{letters}"


def build_fallback_registration_code(*, now_ms: int | None = None) -> str:
    timestamp_ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    digits = str(timestamp_ms)[-FALLBACK_TIMESTAMP_DIGITS:].zfill(FALLBACK_TIMESTAMP_DIGITS)
    return f"{FALLBACK_PREFIX}-{digits}"


def normalize_registration_code(raw_code: str) -> str:
    return raw_code.strip().upper()


def is_well_formed_registration_code(code: str) -> bool:
    return (
        REGISTRATION_CODE_RE.fullmatch(code) is not None
        or FALLBACK_REGISTRATION_CODE_RE.fullmatch(code) is not None
    )
