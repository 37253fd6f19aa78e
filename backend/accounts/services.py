import logging

from django.utils import timezone

from audit.utils import audit_log
from .models import User

log = logging.getLogger(__name__)


def update_driver_location(driver: User, latitude: float, longitude: float) -> User:
    """Store the driver's current position; pickup matching reads it on the next request."""
    now = timezone.now()
    User.objects.filter(pk=driver.pk).update(
        driver_latitude=latitude,
        driver_longitude=longitude,
        driver_location_updated_at=now,
    )
    driver.driver_latitude = latitude
    driver.driver_longitude = longitude
    driver.driver_location_updated_at = now
    audit_log(driver, "DRIVER_LOCATION_UPDATED", target=driver,
              payload={"latitude": latitude, "longitude": longitude})
    log.info("driver %s location -> [%s, %s]", driver.pk, latitude, longitude)
    return driver
