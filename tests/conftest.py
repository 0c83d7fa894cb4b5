import django
from django.conf import settings


def pytest_configure():
    if settings.configured:
        return
    settings.configure(
        DEBUG=False,
        SECRET_KEY="gzipbody-tests",
        ALLOWED_HOSTS=["testserver"],
        INSTALLED_APPS=[
            "django.contrib.contenttypes",
            "django.contrib.auth",
            "rest_framework",
            "gzipbody.framework",
        ],
        MIDDLEWARE=[
            "gzipbody.framework.middleware.DecompressGZipMiddleware",
        ],
        ROOT_URLCONF="urls",
        DEFAULT_CHARSET="utf-8",
        REST_FRAMEWORK={
            "DEFAULT_AUTHENTICATION_CLASSES": [],
            "DEFAULT_PERMISSION_CLASSES": [],
            "UNAUTHENTICATED_USER": None,
        },
    )
    django.setup()
