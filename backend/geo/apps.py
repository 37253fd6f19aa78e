import atexit

from django.apps import AppConfig


class GeoConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "geo"
    services = None

    def ready(self):
        # One geocoder/router per process; the caches behind them are shared (Redis)
        from .services import build_geo_services
        self.services = build_geo_services()
        atexit.register(self.services.close)
