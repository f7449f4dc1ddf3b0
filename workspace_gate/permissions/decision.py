"""Allow/deny verdict shared by the allowlist-based domains."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an allowlist check.

    A denial is a normal result, not an error; ``reason`` explains it.
    """

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason)
