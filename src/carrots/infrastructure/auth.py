"""GitHub authentication and rate-limit tracking.

The access token is read once from the configuration; this module puts it
on outgoing requests and follows the rate-limit budget GitHub reports, so
an exhausted budget shows up in the logs before listings start failing.
"""

import re
import time
from collections.abc import Mapping
from dataclasses import dataclass

from carrots.constants import RATE_LIMIT_WARNING_THRESHOLD
from carrots.logger import get_logger

logger = get_logger(__name__)

# GitHub never issues longer tokens
MAX_TOKEN_LENGTH: int = 255

_TOKEN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[a-f0-9]{40}"),  # classic personal access token
    re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,251}"),  # prefixed tokens
    re.compile(r"github_pat_[A-Za-z0-9_]{36,243}"),  # fine-grained PAT
)


def validate_github_token(token: str | None) -> bool:
    """Check whether a string looks like a GitHub access token.

    Classic tokens are 40 lowercase hex characters; newer ones carry a
    ``ghp_``/``gho_``/``ghu_``/``ghs_``/``ghr_`` or ``github_pat_`` prefix.
    """
    if not isinstance(token, str):
        return False
    token = token.strip()
    if not token or len(token) > MAX_TOKEN_LENGTH:
        return False
    return any(pattern.fullmatch(token) for pattern in _TOKEN_PATTERNS)


@dataclass(slots=True, frozen=True)
class RateLimitBudget:
    """Last rate-limit figures reported by GitHub."""

    remaining: int | None = None
    reset_at: int | None = None


class GitHubAuthManager:
    """Authenticates requests and watches the rate-limit budget."""

    RATE_LIMIT_THRESHOLD: int = RATE_LIMIT_WARNING_THRESHOLD

    def __init__(self, token: str | None = None) -> None:
        """Initialize the auth manager.

        Args:
            token: Optional GitHub access token

        """
        self._token = token.strip() if token else None
        self._budget = RateLimitBudget()
        self._anonymous_notice_logged = False
        self._low_budget_warned = False

    @property
    def has_token(self) -> bool:
        """Whether requests are authenticated."""
        return bool(self._token)

    @property
    def budget(self) -> RateLimitBudget:
        """Rate-limit figures from the most recent response."""
        return self._budget

    def apply_auth(self, headers: dict[str, str]) -> dict[str, str]:
        """Add the Authorization header when a token is configured.

        Without a token the headers are returned unchanged and the
        anonymous rate limit is mentioned once in the logs.
        """
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        elif not self._anonymous_notice_logged:
            self._anonymous_notice_logged = True
            logger.info(
                "No GitHub token configured; anonymous requests are limited "
                "to 60 per hour. Set TOKEN to raise the limit."
            )
        return headers

    def update_rate_limit_info(self, headers: Mapping[str, str]) -> None:
        """Record the X-RateLimit-* headers of a GitHub response.

        Pass the response headers as received; aiohttp matches header
        names case-insensitively and GitHub sends them in lowercase.
        """
        try:
            remaining = _optional_int(headers.get("X-RateLimit-Remaining"))
            reset_at = _optional_int(headers.get("X-RateLimit-Reset"))
        except ValueError:
            logger.debug("Ignoring malformed rate-limit headers")
            return

        self._budget = RateLimitBudget(
            remaining=self._budget.remaining if remaining is None else remaining,
            reset_at=self._budget.reset_at if reset_at is None else reset_at,
        )
        if self._budget.remaining is None:
            return

        if self._budget.remaining >= self.RATE_LIMIT_THRESHOLD:
            self._low_budget_warned = False
        elif not self._low_budget_warned:
            self._low_budget_warned = True
            logger.warning(
                "GitHub rate limit nearly exhausted: %d requests left, "
                "resets in %d s",
                self._budget.remaining,
                self.get_wait_time(),
            )

    def get_wait_time(self) -> int:
        """Seconds until the rate-limit window resets (0 if unknown)."""
        if self._budget.reset_at is None:
            return 0
        return max(0, self._budget.reset_at - int(time.time()))


def _optional_int(value: str | None) -> int | None:
    return None if value is None else int(value)
