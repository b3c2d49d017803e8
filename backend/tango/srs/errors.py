"""Errors raised by the scheduling core."""


class InvalidRatingError(ValueError):
    """Raised when a rating or quality value is outside the recognised buckets."""

    pass


class InvalidConfigurationError(ValueError):
    """Raised for scheduler or session settings that cannot be honoured."""

    pass
