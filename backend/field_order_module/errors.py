class FieldOrderError(Exception):
    """Base class for errors raised by the field ordering services."""


class NotAuthorized(FieldOrderError):
    """The caller's tenant does not own the requested school or record."""


class StorageFailure(FieldOrderError):
    """The backing database rejected or failed a read or write."""


class ValidationFailure(FieldOrderError):
    pass


class FieldNotFound(FieldOrderError):
    pass


class DuplicateField(FieldOrderError):
    pass
