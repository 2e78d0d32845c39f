"""Exception hierarchy shared by all stages of the pipeline."""


class FiskError(Exception):
    """Base class for every error raised by :mod:`fisk`."""


class ParseError(FiskError):
    """The XML input could not be turned into the invoice model."""


class MalformedDocument(ParseError):
    """Input is not well-formed XML (or declares forbidden entities)."""


class SchemaMismatch(ParseError):
    """Well-formed XML that lacks an expected element or value."""


class FieldNotFound(FiskError, LookupError):
    """A required field is absent from an otherwise valid document."""


class ElementNotFound(FieldNotFound):
    def __init__(self, path: str):
        super().__init__(f"can't find element {path}")
        self.path = path


class AttributeNotFound(FieldNotFound):
    def __init__(self, path: str, attribute: str):
        super().__init__(f"can't find attribute {attribute} on {path}")
        self.path = path
        self.attribute = attribute


class InvalidEnvironment(FiskError, ValueError):
    """Environment other than TEST or PRODUCTION."""


class EncodingError(FiskError):
    """QR payload could not be encoded into an image."""


class RenderError(FiskError):
    """The layout could not be written to the output file."""
