"""Report display configuration."""

import logging
import os
from dataclasses import dataclass, field
from datetime import tzinfo as TZInfo
from typing import Mapping, Optional

from dateutil import tz

from retailmetrics.database.base import DataSource
from retailmetrics.domain.errors import ValidationError

logger = logging.getLogger(__name__)

CURRENCY_ENV = "RETAILMETRICS_CURRENCY"
LOCALE_ENV = "RETAILMETRICS_LOCALE"
TIMEZONE_ENV = "RETAILMETRICS_TZ"

DEFAULT_CURRENCY = "USD"
DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class ReportConfig:
    """How reports are bucketed into days and displayed."""

    currency: str = DEFAULT_CURRENCY
    locale: str = DEFAULT_LOCALE
    timezone: TZInfo = field(default_factory=tz.tzlocal)


def resolve_timezone(name: Optional[str]) -> TZInfo:
    """Return the named timezone, or the local zone when no name is given.

    Raises:
        ValidationError: If the name is not a known timezone
    """
    if not name:
        return tz.tzlocal()
    zone = tz.gettz(name)
    if zone is None:
        raise ValidationError(f"Unknown timezone '{name}'")
    return zone


def load_config(
    db: Optional[DataSource] = None, environ: Optional[Mapping[str, str]] = None
) -> ReportConfig:
    """Resolve report configuration.

    Environment variables win over the stored settings, which win over the
    defaults. Only the currency is stored in the settings.

    Args:
        db: Data source holding the settings, if any
        environ: Environment mapping (defaults to os.environ)
    """
    environ = os.environ if environ is None else environ

    currency = environ.get(CURRENCY_ENV)
    if not currency and db is not None:
        currency = db.get_settings().currency
    currency = (currency or DEFAULT_CURRENCY).upper()

    config = ReportConfig(
        currency=currency,
        locale=environ.get(LOCALE_ENV) or DEFAULT_LOCALE,
        timezone=resolve_timezone(environ.get(TIMEZONE_ENV)),
    )
    logger.debug("Report config: currency=%s locale=%s", config.currency, config.locale)
    return config
