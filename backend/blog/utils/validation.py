import re
import secrets
from typing import Any, List, NamedTuple

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
_SLUG_SEPARATOR = re.compile(r"[^a-z0-9]+")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# skip 값이 64비트 정수 범위를 넘지 않도록
MAX_PAGE = (2**63 - 1) // MAX_LIMIT

_HTML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


class Pagination(NamedTuple):
    page: int
    limit: int
    skip: int


class PasswordCheck(NamedTuple):
    is_valid: bool
    errors: List[str]


def validate_email(email: str | None) -> bool:
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_object_id(value: str | None) -> bool:
    """24자리 16진수 문자열인지 확인합니다."""
    if not value:
        return False
    return OBJECT_ID_PATTERN.fullmatch(value) is not None


def new_object_id() -> str:
    return secrets.token_hex(12)


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = re.match(r"^\s*([+-]?\d+)", str(value))
    return int(match.group(1)) if match else None


def validate_pagination(page: Any = None, limit: Any = None) -> Pagination:
    """
    page/limit 쿼리 값을 정규화합니다.
    숫자가 아니면 기본값(1, 10), 숫자면 1 <= page <= MAX_PAGE, 1 <= limit <= 100 으로 고정합니다.
    """
    parsed_page = _parse_int(page)
    parsed_limit = _parse_int(limit)

    valid_page = DEFAULT_PAGE if parsed_page is None else min(MAX_PAGE, max(1, parsed_page))
    valid_limit = DEFAULT_LIMIT if parsed_limit is None else min(MAX_LIMIT, max(1, parsed_limit))
    return Pagination(page=valid_page, limit=valid_limit, skip=(valid_page - 1) * valid_limit)


def validate_password(password: str | None) -> PasswordCheck:
    errors: List[str] = []
    password = password or ""
    if len(password) < 6:
        errors.append("Password must be at least 6 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    return PasswordCheck(is_valid=not errors, errors=errors)


def sanitize_input(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value)


def slugify(text: str) -> str:
    return _SLUG_SEPARATOR.sub("-", text.lower()).strip("-")
