"""Built-in default configuration for the template preparer."""

# Default configuration that serves as the base for all other configs
DEFAULT_CONFIG = {
    "version": "1.0",
    "settings": {
        "working_directory": None,
        "log_level": "INFO",
    },
    "integrations": {
        "bitbucket": [],
    },
}

DEFAULT_BITBUCKET_HOST = "bitbucket.org"
