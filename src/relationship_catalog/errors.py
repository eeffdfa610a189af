# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Exception hierarchy for the relationship catalog."""


class CatalogError(Exception):
    """Raised when catalog data is invalid or cannot be loaded."""

    pass


class NotFoundError(CatalogError, LookupError):
    """Raised when a requested id or relation kind is not in the catalog."""

    pass


class RenderError(CatalogError):
    """Raised when an entry's snippet is malformed for the target format."""

    def __init__(self, message: str, example_id: int = 0) -> None:
        super().__init__(message)
        self.example_id = example_id
