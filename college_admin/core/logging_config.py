import logging
from typing import Optional

from college_admin.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
