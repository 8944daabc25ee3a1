# ============================================================================
# FILE: exceptions.py
# RELPATH: file_bundle/src/fbundle/exceptions.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Exception hierarchy for FileBundle
# ============================================================================

"""
Exception classes for FileBundle.

Setup errors (bad patterns, bad configuration, missing source directory,
uncreatable output) derive from FileBundleError and abort a run before any
file is processed. Per-file problems are reported as warnings and never
raised out of a run.
"""


class FileBundleError(Exception):
    """Base exception for all FileBundle errors."""
    pass


# ============================================================================
# Validation-Related Exceptions
# ============================================================================

class ValidationError(FileBundleError):
    """Base exception for validation errors."""
    pass


class PatternSyntaxError(ValidationError):
    """
    Raised when a glob pattern cannot be compiled.

    Attributes:
        pattern: The problematic glob pattern, as given by the user
        reason: Explanation of the error
    """
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")


# ============================================================================
# Configuration-Related Exceptions
# ============================================================================

class ConfigError(FileBundleError):
    """Base exception for configuration-related errors."""
    pass


class ConfigLoadError(ConfigError):
    """
    Raised when a configuration file cannot be loaded.

    Attributes:
        config_file: Path to the configuration file
        reason: Explanation of the failure
    """
    def __init__(self, config_file: str, reason: str):
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to load config '{config_file}': {reason}")


class ConfigValidationError(ConfigError):
    """
    Raised when a configuration value fails validation.

    Attributes:
        key: Configuration key that failed validation
        value: The invalid value
        reason: Explanation of why validation failed
    """
    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# ============================================================================
# I/O-Related Exceptions
# ============================================================================

class BundleIOError(FileBundleError):
    """Base exception for I/O errors."""
    pass


class SourceDirError(BundleIOError):
    """
    Raised when the source directory cannot be walked at all.

    Attributes:
        path: The source directory
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot scan source directory '{path}': {reason}")


class OutputCreateError(BundleIOError):
    """
    Raised when the bundle output file cannot be created.

    Attributes:
        path: Path of the output file
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot create bundle '{path}': {reason}")


class BundleWriteError(BundleIOError):
    """
    Raised when appending to an open bundle fails.

    Attributes:
        path: Path where writing failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class EncodingError(BundleIOError):
    """
    Describes a file whose bytes could not be decoded.

    Never raised out of a run; the writer uses it to build the warning for a
    file whose content is replaced by an empty body.

    Attributes:
        path: Path to the file with encoding issues
        encoding: The encoding that failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, encoding: str, reason: str):
        self.path = path
        self.encoding = encoding
        self.reason = reason
        super().__init__(
            f"Encoding error for '{path}' (encoding: {encoding}): {reason}"
        )


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (base exception definitions)
# TESTS: tests/unit/test_exceptions.py
# ============================================================================
