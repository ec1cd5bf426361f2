import logging

import httpx

from skywatch.config import settings
from skywatch.errors import SeedError
from skywatch.schemas.weather import SeedSummary

logger = logging.getLogger(__name__)

SEED_PATH = "/api/v1/admin/seed"


async def trigger_seed(base_url: str | None = None) -> SeedSummary:
    """Invoke the remote seed action and return its row counts.

    Raises ``SeedError`` with the server's error message when seeding fails or
    the service cannot be reached.
    """
    url = (base_url or settings.seed_base_url).rstrip("/") + SEED_PATH
    try:
        async with httpx.AsyncClient(timeout=settings.seed_timeout) as client:
            resp = await client.post(url)
            if resp.status_code >= 400:
                raise SeedError(_error_message(resp))
            return SeedSummary.model_validate(resp.json()["stats"])
    except SeedError:
        raise
    except Exception as e:
        logger.warning("Seed trigger failed for %s: %s", url, e)
        raise SeedError(str(e)) from e


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("error") or f"HTTP {resp.status_code}"
    except ValueError:
        return f"HTTP {resp.status_code}"
