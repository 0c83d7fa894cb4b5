import os
from django.apps import AppConfig # type: ignore
from .settings import GzipBodySettings


class GzipBodyConfig(AppConfig):
    name = "gzipbody.framework"
    label = "gzipbody"
    verbose_name = "Gzip Request Bodies"
    path = os.path.dirname(os.path.abspath(__file__))

    def ready(self):
        # Fail at start-up rather than on the first gzipped request
        GzipBodySettings().validate()
