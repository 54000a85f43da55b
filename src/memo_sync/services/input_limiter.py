"""Input length policy applied to the memo body before it reaches a Record."""

from ..models.record import DEFAULT_LIMIT_VALUE, LimitType, MemoSettings


class InputLimiter:
    """Counts and truncates text by characters or UTF-8 bytes."""

    def __init__(
        self,
        limit_type: LimitType = LimitType.CHAR,
        limit_value: int = DEFAULT_LIMIT_VALUE,
    ) -> None:
        """Initialize limiter.

        Args:
            limit_type: CHAR (code points) or BYTE (UTF-8 bytes)
            limit_value: Maximum allowed usage
        """
        self.set_limit(limit_type, limit_value)

    @classmethod
    def from_settings(cls, settings: MemoSettings) -> "InputLimiter":
        """Create a limiter matching record settings."""
        return cls(settings.limit_type, settings.limit_value)

    def set_limit(self, limit_type: LimitType, limit_value: int) -> None:
        """Change the limit.

        Raises:
            ValueError: If the value is not positive
        """
        if limit_value <= 0:
            raise ValueError(f"Limit value must be positive, got {limit_value}")
        self.limit_type = LimitType(limit_type)
        self.limit_value = limit_value

    def calculate_usage(self, text: str) -> int:
        """Return the length of ``text`` under the current policy."""
        if self.limit_type == LimitType.BYTE:
            return len(text.encode("utf-8"))
        return len(text)

    def is_exceeded(self, text: str) -> bool:
        """Check whether ``text`` is over the limit."""
        return self.calculate_usage(text) > self.limit_value

    def remainder(self, text: str) -> int:
        """Remaining allowance (negative when exceeded)."""
        return self.limit_value - self.calculate_usage(text)

    def usage_rate(self, text: str) -> float:
        """Usage as a fraction of the limit."""
        return self.calculate_usage(text) / self.limit_value

    def truncate(self, text: str) -> str:
        """Cut ``text`` down to the limit without splitting a character."""
        if not self.is_exceeded(text):
            return text

        if self.limit_type == LimitType.CHAR:
            return text[: self.limit_value]

        encoded = text.encode("utf-8")[: self.limit_value]
        # Drop a trailing partial multi-byte sequence
        return encoded.decode("utf-8", errors="ignore")
