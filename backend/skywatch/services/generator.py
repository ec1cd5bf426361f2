"""Synthetic weather series for seeding stations.

Closed-form approximations (a diurnal sinusoid plus bounded uniform noise)
that look plausible on charts. The "forecast" is the same formula shifted
forward in time with a mild warming drift; it has no predictive value.

Every function takes an explicit ``random.Random`` so a fixed seed gives
identical output. The series functions are generators: each call starts a
fresh, finite sequence.
"""

import math
import random
from datetime import datetime, timedelta
from typing import Iterator

from skywatch.schemas.weather import AlertCreate, ObservationCreate, PredictionCreate
from skywatch.stations.profiles import ClimateProfile

HUMIDITY_MIN = 20.0
HUMIDITY_MAX = 95.0
CONFIDENCE_MIN = 75.0
CONFIDENCE_MAX = 98.0

HEAT_WAVE_TEMP = 38.0
EXTREME_HEAT_TEMP = 42.0
HEAVY_RAIN_PROBABILITY = 0.22
STRONG_WIND_SPEED = 30.0
HIGH_HUMIDITY = 75.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def hour_factor(hour: int) -> float:
    """Diurnal cycle in [-1, 1]: coolest before dawn, warmest early afternoon."""
    return math.sin((hour - 6) / 24 * math.pi * 2)


def humidity_base(profile: ClimateProfile, factor: float) -> float:
    """Humidity runs opposite to temperature across the profile's band."""
    span = profile.humidity.max - profile.humidity.min
    return profile.humidity.min + span * (1 - (factor + 1) / 2)


def _observation(
    station_id: str,
    profile: ClimateProfile,
    rng: random.Random,
    timestamp: datetime,
    hour: int,
    day: int,
) -> ObservationCreate:
    factor = hour_factor(hour)
    temperature = profile.base_temp + factor * profile.temp_range + rng.uniform(-1, 1)
    humidity = humidity_base(profile, factor) + rng.uniform(-5, 5)
    precipitation = rng.uniform(2, 17) if rng.random() < profile.rain_probability else 0.0
    wind_base = rng.uniform(profile.wind_speed.min, profile.wind_speed.max)
    wind_speed = max(wind_base + rng.uniform(-2.5, 2.5), 0.0)
    pressure = 1010 + math.sin(day / 7 * math.pi) * 8 + rng.uniform(-2.5, 2.5)

    return ObservationCreate(
        station_id=station_id,
        timestamp=timestamp,
        temperature=round(temperature, 2),
        humidity=round(_clamp(humidity, HUMIDITY_MIN, HUMIDITY_MAX), 2),
        precipitation=round(precipitation, 2),
        wind_speed=round(wind_speed, 2),
        pressure=round(pressure, 2),
    )


def generate_observations(
    station_id: str,
    profile: ClimateProfile,
    rng: random.Random,
    now: datetime,
    days: int = 7,
) -> Iterator[ObservationCreate]:
    """Hourly history covering day indexes ``days`` down to 0, oldest first.

    The day bound is inclusive, so ``days=7`` yields 8 * 24 rows. The last row
    is stamped ``now``.
    """
    for day in range(days, -1, -1):
        for hour in range(24):
            timestamp = now - timedelta(hours=day * 24 + (23 - hour))
            yield _observation(station_id, profile, rng, timestamp, hour, day)


def generate_live_observation(
    station_id: str,
    profile: ClimateProfile,
    rng: random.Random,
    at: datetime,
) -> ObservationCreate:
    """A single reading for wall-clock time ``at``, same formulas as the history."""
    return _observation(station_id, profile, rng, at, at.hour, 0)


def generate_predictions(
    station_id: str,
    profile: ClimateProfile,
    rng: random.Random,
    now: datetime,
    days: int = 5,
    step_hours: int = 6,
) -> Iterator[PredictionCreate]:
    for day in range(days):
        for hour in range(0, 24, step_hours):
            prediction_date = now + timedelta(hours=day * 24 + hour)
            trend = day * 0.5
            factor = hour_factor(hour)
            predicted_temp = profile.base_temp + factor * profile.temp_range + trend
            predicted_humidity = humidity_base(profile, factor) + rng.uniform(-4, 4)
            if rng.random() < profile.rain_probability * 0.8:
                predicted_precipitation = rng.uniform(1, 9)
            else:
                predicted_precipitation = 0.0
            confidence = 95 - day * 3 + rng.uniform(-2, 2)

            yield PredictionCreate(
                station_id=station_id,
                prediction_date=prediction_date,
                predicted_temp=round(predicted_temp, 2),
                predicted_humidity=round(
                    _clamp(predicted_humidity, HUMIDITY_MIN, HUMIDITY_MAX), 2
                ),
                predicted_precipitation=round(predicted_precipitation, 2),
                confidence=round(_clamp(confidence, CONFIDENCE_MIN, CONFIDENCE_MAX), 2),
            )


def generate_alerts(
    station_id: str,
    profile: ClimateProfile,
    rng: random.Random,
) -> Iterator[AlertCreate]:
    """Alerts follow from profile thresholds; only high humidity involves chance."""
    base_temp = profile.base_temp

    if base_temp > HEAT_WAVE_TEMP:
        yield AlertCreate(
            station_id=station_id,
            alert_type="Heat Wave Warning",
            severity="extreme" if base_temp > EXTREME_HEAT_TEMP else "high",
            message=(
                f"Heat wave conditions expected. Temperature may reach "
                f"{base_temp + 3:.1f}°C. Stay hydrated and avoid direct sunlight."
            ),
        )

    if profile.rain_probability > HEAVY_RAIN_PROBABILITY:
        yield AlertCreate(
            station_id=station_id,
            alert_type="Heavy Rainfall Alert",
            severity="medium",
            message=(
                "Heavy rainfall expected. Possibility of waterlogging in "
                "low-lying areas. Take necessary precautions."
            ),
        )

    if profile.wind_speed.max > STRONG_WIND_SPEED:
        yield AlertCreate(
            station_id=station_id,
            alert_type="Strong Wind Advisory",
            severity="medium",
            message=(
                f"Strong winds expected with speeds up to "
                f"{profile.wind_speed.max:g} km/h. Secure loose objects."
            ),
        )

    # Coin flip is drawn only when the threshold holds
    if profile.humidity.max > HIGH_HUMIDITY and rng.random() < 0.5:
        yield AlertCreate(
            station_id=station_id,
            alert_type="High Humidity Alert",
            severity="low",
            message=(
                f"High humidity levels expected ({profile.humidity.max:g}%). "
                f"Uncomfortable weather conditions likely."
            ),
        )
