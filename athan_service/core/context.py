from typing import Any, Dict, Optional

from athan_service.core.db import Database


class ServiceContext:
    """Process-scoped collaborators, built once at startup and handed to every router"""

    def __init__(self, config_data: Dict[str, Any], database: Database, client: Optional[Any] = None):
        # Imported here: plugins import core, not the other way round at module load
        from athan_service.plugins.hijri_calendar.service import HijriCalendarSynchronizer
        from athan_service.plugins.prayer.prayer_base import AladhanClient
        from athan_service.plugins.prayer.strategies import AthanService

        self.config_data = config_data or {}
        self.database = database
        self.client = client or AladhanClient(self.config_data.get("upstream") or {})
        self.athan_service = AthanService(self.client)
        self.hijri_synchronizer = HijriCalendarSynchronizer(self.client, database)

    @property
    def default_method(self) -> int:
        return int((self.config_data.get("prayer") or {}).get("default_method", 2))

    def startup(self) -> None:
        self.database.init()

    def shutdown(self) -> None:
        self.database.close()
