"""
Base exception classes for the hproxy configuration engine.
"""


class HProxyError(Exception):
    """Base exception for all hproxy errors."""
    pass


class ConfigurationError(HProxyError):
    """Raised when engine settings or a schema declaration are inconsistent."""

    def __init__(self, config_key: str = None, config_value: str = None, reason: str = None):
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason
        message = "Configuration error"
        if config_key:
            message += f" for '{config_key}'"
        if config_value:
            message += f" with value '{config_value}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NotFoundError(HProxyError):
    """Base exception for entity not found errors."""

    def __init__(self, entity_type: str, identifier: str = None):
        self.entity_type = entity_type
        self.identifier = identifier
        message = f"{entity_type} not found"
        if identifier:
            message += f" with identifier '{identifier}'"
        super().__init__(message)


class UnknownSectionTypeError(NotFoundError):
    """Raised when a section type has no registered field model."""

    def __init__(self, section_type: str):
        self.section_type = section_type
        super().__init__("Section type", section_type)


class SectionNotFoundError(NotFoundError):
    """Raised when a section identifier does not exist in the snapshot."""

    def __init__(self, section_type: str, section_id: str):
        self.section_type = section_type
        self.section_id = section_id
        super().__init__(f"Section of type '{section_type}'", section_id)


class UnknownFieldError(NotFoundError):
    """Raised when a field key is not declared for a section type."""

    def __init__(self, section_type: str, key: str):
        self.section_type = section_type
        self.key = key
        super().__init__(f"Field of section type '{section_type}'", key)
