"""
Password Generator — Random passwords and strength scoring.

``generate_password`` draws every character with ``secrets.choice`` from
the union of the enabled character classes; with every class disabled it
falls back to lowercase letters.

``password_strength`` counts seven criteria (length >= 8, >= 12, >= 16,
lowercase, uppercase, digit, other character) and maps the count to a
four-step band.

Security Note:
    Never log generated passwords.
"""
import re
import secrets
from typing import NamedTuple

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

DEFAULT_LENGTH = 16

_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_OTHER_RE = re.compile(r"[^a-zA-Z0-9]")


class PasswordStrength(NamedTuple):
    score: int
    label: str


WEAK = PasswordStrength(1, "Weak")
FAIR = PasswordStrength(2, "Fair")
GOOD = PasswordStrength(3, "Good")
STRONG = PasswordStrength(4, "Strong")


def charset_for(
    uppercase: bool = True,
    lowercase: bool = True,
    numbers: bool = True,
    symbols: bool = True,
) -> str:
    """Return the characters a generated password may contain."""
    charset = ""
    if uppercase:
        charset += UPPERCASE
    if lowercase:
        charset += LOWERCASE
    if numbers:
        charset += DIGITS
    if symbols:
        charset += SYMBOLS
    return charset or LOWERCASE


def generate_password(
    length: int = DEFAULT_LENGTH,
    *,
    uppercase: bool = True,
    lowercase: bool = True,
    numbers: bool = True,
    symbols: bool = True,
) -> str:
    """Generate a random password.

    Args:
        length: Number of characters.
        uppercase: Allow A-Z.
        lowercase: Allow a-z.
        numbers: Allow 0-9.
        symbols: Allow punctuation from :data:`SYMBOLS`.

    Returns:
        Password of exactly ``length`` characters.

    Raises:
        ValueError: If length is negative.
    """
    if length < 0:
        raise ValueError(f"Password length cannot be negative: {length}")
    charset = charset_for(uppercase, lowercase, numbers, symbols)
    return "".join(secrets.choice(charset) for _ in range(length))


def password_strength(password: str) -> PasswordStrength:
    """Score a password as Weak, Fair, Good or Strong."""
    points = sum((
        len(password) >= 8,
        len(password) >= 12,
        len(password) >= 16,
        bool(_LOWER_RE.search(password)),
        bool(_UPPER_RE.search(password)),
        bool(_DIGIT_RE.search(password)),
        bool(_OTHER_RE.search(password)),
    ))
    if points <= 2:
        return WEAK
    if points <= 4:
        return FAIR
    if points <= 5:
        return GOOD
    return STRONG
