"""Shared notice payload schema (v1).

A notice is the transient message the storefront UI shows after an action
(a toast). Every checkout outcome maps to exactly one notice.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class NoticeSeverityV1(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class CheckoutOutcomeV1(str, Enum):
    SUCCESS = "SUCCESS"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    RATE_LIMITED = "RATE_LIMITED"
    FAILURE = "FAILURE"


class NoticeV1(BaseModel):
    severity: NoticeSeverityV1
    message: str
