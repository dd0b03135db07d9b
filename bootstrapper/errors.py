class BootstrapError(Exception):
    pass


class ConfigError(BootstrapError, ValueError):
    """
    Configuration is malformed or inconsistent.

    Raised before any network activity takes place.
    """


class AddRejected(BootstrapError):
    """
    The cluster did not return a member when asked to add one.
    """


class WriteError(BootstrapError):
    """
    The parameters file could not be written.
    """
