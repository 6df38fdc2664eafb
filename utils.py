import math
import re
import time
from datetime import date
from typing import Callable, Iterable, Optional, Union

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
MIN_PASSWORD_LENGTH = 8
MIN_SIGNUP_PASSWORD_LENGTH = 6
CODE_LENGTH = 6


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    return authorization.replace("Bearer ", "").strip() or None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def password_requirements(password: str) -> dict:
    return {
        "min_length": len(password) >= MIN_PASSWORD_LENGTH,
        "has_number": re.search(r"[0-9]", password) is not None,
        "has_special_char": any(c in SPECIAL_CHARACTERS for c in password),
    }


def is_password_valid(password: str) -> bool:
    return all(password_requirements(password).values())


def passwords_match(password: str, confirm_password: str) -> bool:
    return password != "" and password == confirm_password


def can_submit_reset(password: str, confirm_password: str) -> bool:
    return is_password_valid(password) and passwords_match(password, confirm_password)


def normalize_code(code: Union[list[str], str]) -> str:
    """Join per-digit inputs, or strip a pasted code down to its digits."""
    if isinstance(code, list):
        return "".join(code)
    return re.sub(r"\D", "", code)


def is_valid_code(code: str) -> bool:
    return len(code) == CODE_LENGTH and code.isdigit()


def average_rating(ratings: Iterable[float]) -> float:
    ratings = list(ratings)
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 1)


def format_date(value: str) -> str:
    """'2023-10-05' -> 'Oct 5, 2023'"""
    d = date.fromisoformat(value)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def initials(name: str) -> str:
    return name[:1].upper()


class Cooldown:
    """Tracks per-key cooldown windows, e.g. resend-verification per email."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._started: dict[str, float] = {}

    def _prune(self):
        now = self._clock()
        for key in [k for k, started in self._started.items() if now - started >= self.seconds]:
            del self._started[key]

    def remaining(self, key: str) -> int:
        self._prune()
        started = self._started.get(key)
        if started is None:
            return 0
        left = self.seconds - (self._clock() - started)
        return max(0, math.ceil(left))

    def start(self, key: str):
        self._prune()
        self._started[key] = self._clock()

    def reset(self):
        self._started.clear()

    def __len__(self):
        return len(self._started)
