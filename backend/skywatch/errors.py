class SkyWatchError(Exception):
    """Base class for errors raised by the service layer."""


class StationNotFound(SkyWatchError):
    def __init__(self, station_id: str):
        super().__init__(f"Station {station_id} not found")
        self.station_id = station_id


class AlertNotFound(SkyWatchError):
    def __init__(self, alert_id: str):
        super().__init__(f"Alert {alert_id} not found")
        self.alert_id = alert_id


class SeedError(SkyWatchError):
    """Seeding failed; nothing from the failed run was committed."""
