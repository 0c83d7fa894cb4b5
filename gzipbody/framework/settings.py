import codecs
from django.conf import settings # type: ignore
from django.core.exceptions import ImproperlyConfigured # type: ignore


SETTINGS_NAME = "GZIP_BODY"

DEFAULTS = {
    # Set to False to remove the middleware from the chain at start-up.
    "ENABLED": True,
    # Charset used to decode form parameters when the request declares none.
    "DEFAULT_CHARSET": "ISO-8859-1",
    # Upper bound for an inflated body in bytes, None means unlimited.
    "MAX_SIZE": None,
}


class GzipBodySettings:
    """
    Settings of the gzip body middleware, read from ``settings.GZIP_BODY``.

    Any key that is not configured falls back to its value in ``DEFAULTS``::

        GZIP_BODY = {
            "DEFAULT_CHARSET": "utf-8",
            "MAX_SIZE": 10 * 1024 * 1024,
        }

    Attributes:
        user_settings (dict): The configured values, without defaults applied.
    """

    def __init__(self, user_settings: dict = None):
        """
        Args:
            user_settings (dict): Explicit settings. When omitted they are read
                from the Django settings module.
        """
        if user_settings is None:
            user_settings = getattr(settings, SETTINGS_NAME, None) or {}
        self.user_settings = dict(user_settings)

    def __getattr__(self, name):
        if name not in DEFAULTS:
            raise AttributeError(f"Invalid {SETTINGS_NAME} setting: '{name}'")
        return self.user_settings.get(name, DEFAULTS[name])

    def validate(self):
        """
        Checks the configured values.

        Raises:
            ImproperlyConfigured: If a key is unknown or a value is not usable.
        """
        unknown = set(self.user_settings) - set(DEFAULTS)
        if unknown:
            raise ImproperlyConfigured(
                f"Unknown {SETTINGS_NAME} settings: {', '.join(sorted(unknown))}"
            )

        try:
            codecs.lookup(self.DEFAULT_CHARSET)
        except (LookupError, TypeError):
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['DEFAULT_CHARSET'] is not a known charset: {self.DEFAULT_CHARSET!r}"
            )

        max_size = self.MAX_SIZE
        if max_size is not None and (
            isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 0
        ):
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['MAX_SIZE'] must be a non-negative integer or None, got {max_size!r}"
            )
        return self
