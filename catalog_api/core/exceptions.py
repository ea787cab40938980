# catalog_api/core/exceptions.py

class CatalogError(Exception):
    """Base class for errors raised by repositories and routers."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class DomainValidationError(CatalogError):
    """Input that passed DTO validation but is invalid for the catalog."""
    pass


class ResourceNotFoundError(CatalogError):
    """The referenced entity does not exist."""
    pass


class ConflictError(CatalogError):
    """The operation conflicts with the stored state."""
    pass
