"""Station roster and regional climate profiles used to synthesize seed data.

The profiles are hand-authored approximations of each city's climate, not
derived from measurements.
"""

from dataclasses import dataclass

from skywatch.config import settings


@dataclass(frozen=True)
class Band:
    min: float
    max: float


@dataclass(frozen=True)
class ClimateProfile:
    base_temp: float  # °C
    temp_range: float  # diurnal swing either side of base_temp, °C
    humidity: Band  # %
    rain_probability: float  # per-hour chance of rain, 0..1
    wind_speed: Band  # km/h


@dataclass(frozen=True)
class StationDefinition:
    name: str
    location: str
    latitude: float
    longitude: float


STATIONS = [
    StationDefinition(
        name="Mumbai",
        location="Maharashtra, Western India",
        latitude=19.0760,
        longitude=72.8777,
    ),
    StationDefinition(
        name="Pune",
        location="Maharashtra, Western India",
        latitude=18.5204,
        longitude=73.8567,
    ),
    StationDefinition(
        name="Alandi",
        location="Maharashtra, Western India",
        latitude=18.6776,
        longitude=73.8987,
    ),
    StationDefinition(
        name="Sangamner",
        location="Maharashtra, Central India",
        latitude=19.5673,
        longitude=74.2058,
    ),
    StationDefinition(
        name="Nagpur",
        location="Maharashtra, Central India",
        latitude=21.1458,
        longitude=79.0882,
    ),
]

CLIMATE_PROFILES: dict[str, ClimateProfile] = {
    "Mumbai": ClimateProfile(
        base_temp=30, temp_range=5, humidity=Band(65, 85),
        rain_probability=0.25, wind_speed=Band(10, 35),
    ),
    "Pune": ClimateProfile(
        base_temp=28, temp_range=7, humidity=Band(45, 70),
        rain_probability=0.15, wind_speed=Band(8, 25),
    ),
    "Alandi": ClimateProfile(
        base_temp=27, temp_range=6, humidity=Band(50, 75),
        rain_probability=0.18, wind_speed=Band(7, 22),
    ),
    "Sangamner": ClimateProfile(
        base_temp=29, temp_range=8, humidity=Band(40, 65),
        rain_probability=0.20, wind_speed=Band(12, 30),
    ),
    "Nagpur": ClimateProfile(
        base_temp=32, temp_range=9, humidity=Band(35, 60),
        rain_probability=0.12, wind_speed=Band(5, 20),
    ),
}


def get_profile(station_name: str) -> ClimateProfile:
    """Profile for a station name, or the configured default for unknown names."""
    profile = CLIMATE_PROFILES.get(station_name)
    if profile is None:
        return CLIMATE_PROFILES[settings.default_profile]
    return profile
