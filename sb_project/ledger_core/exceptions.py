from django.core.exceptions import ImproperlyConfigured, ValidationError

""" Input errors subclass Django's ValidationError
so views, admin and forms all treat them as "bad request". """


class UnbalancedJournalError(ValidationError):
    """Raised when a journal entry fails the double-entry balance check."""
    pass


class DuplicateKeyError(ValidationError):
    """Raised when a unique business key (account code, SKU) is taken."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class DuplicateCodeError(DuplicateKeyError):
    pass


class DuplicateSkuError(DuplicateKeyError):
    pass


class InsufficientQuantityError(ValidationError):
    """Raised when a transaction would drive an item's quantity below 0."""

    def __init__(self, message, item=None):
        super().__init__(message)
        self.item = item


class AccountInUseError(ValidationError):
    """Raised when deleting an account that is referenced or required."""
    pass


class NotFoundError(Exception):
    """Raised when a referenced row (account, item, entry) does not exist."""
    pass


class UnauthorizedError(Exception):
    """Raised when the caller is not an authenticated administrator."""
    pass


class ConfigurationError(ImproperlyConfigured):
    """Raised when the chart of accounts is missing something the engine needs."""
    pass


class MissingControlAccountError(ConfigurationError):
    """Raised when a configured control account code has no Account row."""

    def __init__(self, code, role=None):
        self.code = code
        self.role = role
        label = f" ({role})" if role else ""
        super().__init__(f"Control account {code}{label} is not configured")
