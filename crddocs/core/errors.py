"""Exceptions raised while generating CRD documentation.

Only AcquisitionError and ConfigError are meant to reach the process
boundary. Everything else is recovered by the loop that produced it.
"""

from pathlib import Path
from typing import Optional, Union


class CRDDocsError(Exception):
    """Base class for all crddocs errors."""


class AcquisitionError(CRDDocsError):
    """Raised when a source repository cannot be cloned.

    Attributes:
        url: Repository URL that was being fetched
        ref: Branch or tag that was requested
    """

    def __init__(self, message: str, url: Optional[str] = None, ref: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url
        self.ref = ref


class ConfigError(CRDDocsError):
    """Raised when the configuration file is missing or malformed."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = path


class FileReadError(CRDDocsError):
    """Raised when a candidate definition file cannot be read.

    Attributes:
        path: File that failed
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(FileReadError):
    """Raised when a candidate definition file holds an undecodable document.

    Any document failing to decode fails the whole file.
    """


class SchemaParseError(CRDDocsError):
    """Raised when a version's raw openAPIV3Schema cannot be parsed.

    Attributes:
        field: Part of the schema being extracted ("spec", "status" or "description")
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class AnnotationError(CRDDocsError):
    """Raised when annotation documentation cannot be collected."""


class EmitError(CRDDocsError):
    """Raised when a documentation page cannot be rendered or written.

    Attributes:
        name: Name of the CRD whose page failed
    """

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name
