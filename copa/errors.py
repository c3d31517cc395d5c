"""Exception types raised while expanding templates"""


class CopaError(Exception):
    """Base class for copa errors"""


class ResourceNotFoundError(CopaError):
    """A placeholder path does not exist or selects no files"""


class FetchError(CopaError):
    """A web placeholder could not be fetched"""


class TemplateRecursionError(CopaError):
    """Nested ``:eval`` templates form a cycle or nest too deeply"""


class TemplateReadError(CopaError):
    """The top-level template file could not be read"""
