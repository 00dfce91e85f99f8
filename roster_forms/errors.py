"""Error types raised while loading records and filling templates."""


class RosterFormsError(Exception):
    """Base class for every error this package raises on purpose."""


class NotFoundError(RosterFormsError, FileNotFoundError):
    """A data, config or template file does not exist."""


class ShapeError(RosterFormsError, ValueError):
    """A JSON document does not have the expected shape."""


class MissingSheetError(RosterFormsError, LookupError):
    """The expected worksheet is absent from a template workbook."""
