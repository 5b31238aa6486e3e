"""Custom exceptions used across pagediff."""

__all__ = [
    "PageDiffError",
    "ConfigurationError",
    "InvalidDimensionsError",
    "PageCountMismatchError",
    "DimensionMismatchError",
]


class PageDiffError(Exception):
    """Base class for every error raised by pagediff."""

    pass


class ConfigurationError(PageDiffError, ValueError):
    """Raised when comparison parameters or inputs are invalid."""

    pass


class InvalidDimensionsError(ConfigurationError):
    """Raised when PDF pages have invalid sizes."""

    pass


class PageCountMismatchError(PageDiffError):
    """Raised when page counts differ and smart alignment is disabled."""

    def __init__(self, count_a: int, count_b: int) -> None:
        super().__init__(
            f"Page count mismatch: {count_a} vs {count_b}. "
            "Enable smart alignment to handle different page counts."
        )
        self.count_a = count_a
        self.count_b = count_b


class DimensionMismatchError(PageDiffError):
    """Raised when two bitmaps of different size reach the pixel comparator.

    Padding always equalises both sides first, so this signals a bug rather
    than bad input.
    """

    pass
