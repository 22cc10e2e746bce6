"""
Identifiers.

Forms, templates and categories get short readable ids of the form
``<prefix>-XXXXXXXX`` (8 symbols from a 62-symbol alphabet). Each entity has
its own str subclass so a TemplateId can't be passed where a FormId is
expected without tripping the constructor.

Rows nobody reads by hand (fields, versions, drafts, submissions) use a
denser url-safe token instead.
"""
from __future__ import annotations

import logging
import re
import secrets
import string
from typing import ClassVar

from sqlalchemy.orm import Session

from formhost.core.errors import IdGenerationExhausted

logger = logging.getLogger(__name__)

B62 = string.digits + string.ascii_uppercase + string.ascii_lowercase
SHORT_ID_LENGTH = 8
MAX_ATTEMPTS = 5


def short_token(n: int = SHORT_ID_LENGTH) -> str:
    return "".join(secrets.choice(B62) for _ in range(n))


def row_id() -> str:
    return secrets.token_urlsafe(9)


class PrefixedId(str):
    prefix: ClassVar[str] = ""
    _pattern: ClassVar[re.Pattern]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._pattern = re.compile(rf"^{re.escape(cls.prefix)}-[A-Za-z0-9]{{{SHORT_ID_LENGTH}}}$")

    def __new__(cls, value: str):
        if not isinstance(value, str) or not cls._pattern.match(value):
            raise ValueError(f"Not a valid {cls.__name__}: {value!r}")
        return super().__new__(cls, value)

    @classmethod
    def is_valid(cls, value) -> bool:
        return isinstance(value, str) and bool(cls._pattern.match(value))

    @classmethod
    def random(cls):
        return cls(f"{cls.prefix}-{short_token()}")


class FormId(PrefixedId):
    prefix = "form"


class TemplateId(PrefixedId):
    prefix = "template"


class CategoryId(PrefixedId):
    prefix = "category"


def generate_unique_id(db: Session, model, id_type: type[PrefixedId]) -> PrefixedId:
    """
    Draw ids until one is free in model's table. A collision at this key
    length means something else is wrong, so exhaustion is logged loudly.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        candidate = id_type.random()
        if db.get(model, str(candidate)) is None:
            return candidate
        logger.warning("Id collision on %s (attempt %d)", candidate, attempt)

    logger.error(
        "Could not generate unique %s id after %d attempts; check for id reuse",
        id_type.prefix,
        MAX_ATTEMPTS,
    )
    raise IdGenerationExhausted(id_type.prefix)
