# lockbox/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

BEARER_PREFIX = "Bearer "


class RequestMetadata(Protocol):
    """What the orchestrator reads from an inbound request.

    :class:`flask.Request` satisfies it, so do plain test doubles.
    """

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def cookies(self) -> Mapping[str, str]: ...


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """
    Where bearer credentials are looked up.

    :param header_name: Request header checked first.
    :type header_name: str
    :param cookie_name: Cookie checked when the header is absent.
    :type cookie_name: str
    """

    header_name: str = "Authorization"
    cookie_name: str = "authorization"
