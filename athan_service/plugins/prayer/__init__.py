from .prayer_base import AladhanClient, PrayerDay
from .strategies import AthanService, CityPrayerTimeStrategy, CoordinatesPrayerTimeStrategy

__all__ = ["AladhanClient", "PrayerDay", "AthanService", "CityPrayerTimeStrategy", "CoordinatesPrayerTimeStrategy"]
