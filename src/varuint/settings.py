from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # pyright: ignore[reportMissingImports]


# Settings key constants
SETTING_OUTPUT_UPPERCASE = 'output.uppercase'
SETTING_OUTPUT_SEPARATOR = 'output.separator'
SETTING_LOGGING_PATH = 'logging.path'
SETTING_LOGGING_LEVEL = 'logging.level'


class Settings:
    """Settings manager for the varuint command line tool.

    Provides a read-only key-value interface to a TOML settings file. The class does
    not interpret the values; consumers look up the keys they understand.

    Example:
        settings = Settings(Path('varuint.toml'))
        uppercase = settings.get(SETTING_OUTPUT_UPPERCASE, False)
    """

    def __init__(self, settings_file: Path | None = None):
        """Initialize settings from a TOML file.

        If settings_file is None or does not exist, an empty settings dictionary is
        used, and all get() calls will return their defaults.

        Args:
            settings_file: Path to the TOML settings file
        """
        self._settings_file = settings_file
        self._settings = {}

        if settings_file is not None and settings_file.exists():
            with open(settings_file, 'rb') as f:
                self._settings = tomllib.load(f)

    @property
    def settings_file(self) -> Path | None:
        return self._settings_file

    def get(self, key: str, default=None):
        """Get a setting value by key with optional default.

        Dot notation accesses nested tables: 'output.separator' reads
        settings['output']['separator']. Returns the default value if the key path
        does not exist or if any intermediate value is not a table.

        Examples:
            >>> settings.get(SETTING_OUTPUT_SEPARATOR, '')
            ' '
            >>> settings.get('nonexistent.key', 'fallback')
            'fallback'
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
