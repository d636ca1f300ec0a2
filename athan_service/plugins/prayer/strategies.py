"""
Prayer-time strategies and the service that picks one.

A strategy says whether it can handle a parameter mapping and, if picked, fetches
the current Gregorian month from the Aladhan client. AthanService holds a fixed,
ordered tuple of strategies: coordinates first, city last.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from athan_service.core.errors import NoStrategyFound, ParametersNotValid, UnknownStrategy
from athan_service.plugins.prayer.prayer_base import AladhanClient, PrayerDay

ATHAN_API_PREFIX = "athan-api-"


def _is_number(value: Any) -> bool:
    # bool is an int subclass but is not a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PrayerTimeStrategy(ABC):
    """Base class for the ways a prayer-time request can be satisfied"""

    name = ""

    def __init__(self, client: AladhanClient, today: Optional[Callable[[], date]] = None):
        self.client = client
        self._today = today or date.today
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def can_handle(self, params: Mapping[str, Any]) -> bool:
        """True if this strategy can serve the given parameters"""
        pass

    @abstractmethod
    def get_prayer_times(self, params: Mapping[str, Any]) -> List[PrayerDay]:
        """Fetch prayer times for the current Gregorian month"""
        pass

    def _current_month(self) -> Tuple[int, int]:
        today = self._today()
        return today.month, today.year


class CoordinatesPrayerTimeStrategy(PrayerTimeStrategy):
    name = "coordinates"

    def can_handle(self, params: Mapping[str, Any]) -> bool:
        return (
            _is_number(params.get("lat"))
            and _is_number(params.get("lon"))
            and _is_number(params.get("method"))
            and _is_number(params.get("duration"))
            and params["duration"] > 0
        )

    def get_prayer_times(self, params: Mapping[str, Any]) -> List[PrayerDay]:
        self.logger.debug(
            f"Executing coordinates strategy for lat={params.get('lat')}, lon={params.get('lon')}, "
            f"method={params.get('method')}, duration={params.get('duration')}"
        )
        # duration is accepted but not applied: Aladhan answers with the whole month
        month, year = self._current_month()
        return self.client.get_calendar_by_coordinates(
            params["lat"], params["lon"], params["method"], month, year
        )


class CityPrayerTimeStrategy(PrayerTimeStrategy):
    name = "city"

    def can_handle(self, params: Mapping[str, Any]) -> bool:
        # Accepts anything, so it is the catch-all at the end of the list.
        # city/country/method are not validated here; Aladhan rejects bad ones.
        return True

    def get_prayer_times(self, params: Mapping[str, Any]) -> List[PrayerDay]:
        self.logger.debug(
            f"Executing city strategy for city={params.get('city')}, country={params.get('country')}, "
            f"method={params.get('method')}, duration={params.get('duration')}"
        )
        month, year = self._current_month()
        return self.client.get_calendar_by_city(
            params.get("city"), params.get("country"), params.get("method"), month, year
        )


class AthanService:
    """Picks a strategy implicitly (first can_handle wins) or explicitly by name"""

    def __init__(self, client: AladhanClient, today: Optional[Callable[[], date]] = None):
        self.client = client
        self.logger = logging.getLogger(self.__class__.__name__)
        self.coordinates_strategy = CoordinatesPrayerTimeStrategy(client, today)
        self.city_strategy = CityPrayerTimeStrategy(client, today)
        self.strategies: Tuple[PrayerTimeStrategy, ...] = (self.coordinates_strategy, self.city_strategy)

    def get_prayer_times(self, params: Mapping[str, Any]) -> List[PrayerDay]:
        self.logger.info(f"Attempting to get prayer times with parameters: {dict(params)}")

        strategy = next((s for s in self.strategies if s.can_handle(params)), None)
        if strategy is None:
            self.logger.error(f"No suitable strategy found for parameters: {dict(params)}")
            raise NoStrategyFound(
                "Invalid parameters for fetching prayer times. Please provide either coordinates "
                "(lat, lon, method, duration) or city (city, country, method, duration)."
            )

        return strategy.get_prayer_times(params)

    def get_methods(self) -> Dict[str, Any]:
        self.logger.info("Fetching available prayer calculation methods.")
        return self.client.get_methods()

    def execute_strategy_by_name(self, strategy_name: str, params: Mapping[str, Any]) -> List[PrayerDay]:
        """
        Run a strategy chosen by name, bypassing implicit selection.

        "athan-api-<id>" runs the city strategy with method overridden from the name.
        Only the LAST character of the name is parsed, so "athan-api-12" runs method 2.
        """
        self.logger.info(f'Attempting to execute strategy "{strategy_name}" with parameters: {dict(params)}')

        if not strategy_name or not strategy_name.lower().startswith(ATHAN_API_PREFIX):
            self.logger.error(f'Unknown strategy name: "{strategy_name}"')
            raise UnknownStrategy(f'Strategy "{strategy_name}" not found. Available strategies: \'{ATHAN_API_PREFIX}<method>\'.')

        selected = self.city_strategy
        params = dict(params)
        try:
            params["method"] = int(strategy_name[-1])
        except ValueError as e:
            raise ParametersNotValid(f'Strategy "{strategy_name}" does not end with a method id.') from e

        if not selected.can_handle(params):
            self.logger.error(f'Selected strategy "{strategy_name}" cannot handle parameters: {params}')
            raise ParametersNotValid(
                f'Parameters are not valid for the "{strategy_name}" strategy. '
                f'Please check the required parameters for this strategy.'
            )

        return selected.get_prayer_times(params)
