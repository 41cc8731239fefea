class AuditError(Exception):
    """Base class for pipeline-level failures that stop a run."""


class ConfigError(AuditError):
    pass


class ConfigNotFound(ConfigError, FileNotFoundError):
    pass


class UnsupportedConfigFormat(ConfigError, ValueError):
    pass


class ConfigParseError(ConfigError, ValueError):
    pass
