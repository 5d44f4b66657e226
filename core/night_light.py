"""
Automatic night light driven by local sunrise and sunset.

Sun times come from a simplified solar-declination model (no equation of
time), computed at most once per calendar day.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.command_gateway import CommandGateway, shell_quote
from core.scheduler import PollHandle, Scheduler
from core.state_store import NIGHT_LIGHT_MARKER, MarkerStore, ShellState
from statusbar_shell.statusbar_shell import logger as app_logger

CHECK_INTERVAL_MS = 60_000
# Sun centre 0.833 degrees below the horizon accounts for refraction and disc radius.
SUNRISE_ZENITH_DEGREES = 90.833


@dataclass(frozen=True)
class SunTimes:
    sunrise: float
    sunset: float


@dataclass(frozen=True)
class NightLightSchedule:
    sunrise: float
    sunset: float
    computed_for_day: int
    computed_for_year: int


def calculate_sun_times(
    day_of_year: int,
    *,
    latitude: float,
    longitude: float,
    utc_offset_hours: float,
) -> SunTimes:
    """Sunrise and sunset as decimal local hours for ``day_of_year``."""
    lat = math.radians(latitude)
    declination = math.radians(-23.45 * math.cos(2 * math.pi * (day_of_year + 10) / 365))
    zenith = math.radians(SUNRISE_ZENITH_DEGREES)
    cos_hour_angle = (math.cos(zenith) - math.sin(lat) * math.sin(declination)) / (
        math.cos(lat) * math.cos(declination)
    )
    # Polar day/night pushes the cosine outside [-1, 1].
    hour_angle = math.degrees(math.acos(max(-1.0, min(1.0, cos_hour_angle))))
    solar_noon = 12 - longitude / 15
    return SunTimes(
        sunrise=solar_noon - hour_angle / 15 + utc_offset_hours,
        sunset=solar_noon + hour_angle / 15 + utc_offset_hours,
    )


def is_night(hour: float, schedule: NightLightSchedule) -> bool:
    return hour >= schedule.sunset or hour < schedule.sunrise


def format_sun_time(decimal_hour: float) -> str:
    """Render a decimal hour as ``H:MM AM``/``H:MM PM``."""
    total_minutes = int(round(decimal_hour * 60)) % (24 * 60)
    hour, minutes = divmod(total_minutes, 60)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minutes:02d} {suffix}"


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _decimal_hour(moment: datetime) -> float:
    return moment.hour + moment.minute / 60


class SunScheduleCache:
    """Day-scoped cache in front of ``calculate_sun_times``."""

    def __init__(
        self,
        *,
        latitude: float,
        longitude: float,
        calculator: Callable[..., SunTimes] = calculate_sun_times,
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self._calculator = calculator
        self._cached: Optional[NightLightSchedule] = None

    def schedule_for(self, moment: datetime) -> NightLightSchedule:
        day = moment.timetuple().tm_yday
        cached = self._cached
        if cached is not None and cached.computed_for_day == day and cached.computed_for_year == moment.year:
            return cached
        offset = moment.utcoffset()
        utc_offset_hours = offset.total_seconds() / 3600 if offset is not None else 0.0
        times = self._calculator(
            day,
            latitude=self.latitude,
            longitude=self.longitude,
            utc_offset_hours=utc_offset_hours,
        )
        self._cached = NightLightSchedule(
            sunrise=times.sunrise,
            sunset=times.sunset,
            computed_for_day=day,
            computed_for_year=moment.year,
        )
        return self._cached


class NightLightController(QObject):
    """
    Applies the night light either from the sun schedule (auto mode) or from
    the user's manual toggle.

    A manual toggle switches auto mode off; turning auto mode back on applies
    the solar state right away instead of waiting for the next check.
    """

    stateChanged = Signal(bool, bool)

    def __init__(
        self,
        state: ShellState,
        markers: MarkerStore,
        gateway: CommandGateway,
        scheduler: Scheduler,
        cache: SunScheduleCache,
        *,
        brightness_script: str,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        super().__init__()
        self._state = state
        self._markers = markers
        self._gateway = gateway
        self._scheduler = scheduler
        self._cache = cache
        self._brightness_script = brightness_script
        self._clock = clock
        self._handle: Optional[PollHandle] = None
        self._logger = app_logger.get_logger()

    @property
    def enabled(self) -> bool:
        return self._state.night_light_enabled

    @property
    def auto_mode(self) -> bool:
        return self._state.night_light_auto

    def schedule(self) -> NightLightSchedule:
        return self._cache.schedule_for(self._clock())

    def is_night_now(self) -> bool:
        now = self._clock()
        return is_night(_decimal_hour(now), self._cache.schedule_for(now))

    def describe(self) -> str:
        if not self._state.night_light_auto:
            return "Manual mode"
        schedule = self.schedule()
        return f"Auto: {format_sun_time(schedule.sunset)} - {format_sun_time(schedule.sunrise)}"

    def start(self) -> None:
        if self._handle is not None and self._handle.active:
            return
        self.check()
        self._handle = self._scheduler.every(CHECK_INTERVAL_MS, self.check)

    def stop(self) -> None:
        self._scheduler.cancel(self._handle)
        self._handle = None

    def check(self) -> None:
        if not self._state.night_light_auto:
            return
        should_be_on = self.is_night_now()
        if should_be_on != self._state.night_light_enabled:
            self.apply(should_be_on)
            self._logger.info("Auto night light: {}", "enabled" if should_be_on else "disabled")

    def apply(self, enabled: bool) -> None:
        self._state.night_light_enabled = enabled
        self._markers.write(NIGHT_LIGHT_MARKER, enabled)
        self._gateway.run_async(f"{shell_quote(self._brightness_script)} {self._state.brightness}")
        self.stateChanged.emit(self._state.night_light_enabled, self._state.night_light_auto)

    def toggle_manual(self) -> None:
        self._state.night_light_auto = False
        self.apply(not self._state.night_light_enabled)

    def set_auto(self, auto: bool) -> None:
        if auto == self._state.night_light_auto:
            return
        self._state.night_light_auto = auto
        if auto:
            self.apply(self.is_night_now())
        else:
            self.stateChanged.emit(self._state.night_light_enabled, auto)

    def toggle_auto(self) -> None:
        self.set_auto(not self._state.night_light_auto)
