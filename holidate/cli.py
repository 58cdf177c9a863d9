"""Command line interface module."""

import click
from datetime import date
from typing import Iterable, Optional

from .config import Config
from .error_handler import BaseApplicationError, ValidationError
from .holidays import next_holidays
from .models import Holiday
from .security import validate_country_code_input, validate_date_input
from .logging_config import LogLevel, LogFormat, setup_logging, cleanup_logging


def _parse_date(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return validate_date_input(value)
    except ValidationError as e:
        raise click.BadParameter(e.get_user_message())


def comma_sep(items: Iterable) -> str:
    """Join items into a comma-separated string."""
    return ', '.join(str(item) for item in items)


def format_holiday(holiday: Holiday) -> str:
    """Render a holiday on one line."""
    counties = comma_sep(holiday.counties)
    types = comma_sep(holiday.types)
    return f"{holiday.date.isoformat()} {holiday.name:40} {counties:25} {types}"


@click.command()
@click.argument('country_code')
@click.option('--relative-to', '-r', callback=_parse_date,
              help='Date relative to which the next holidays are found (YYYY-MM-DD, default: today)')
@click.option('--number', '-n', type=click.IntRange(min=1),
              help='How many holidays to retrieve (default: 5)')
@click.option('--config', '-c', help='Configuration file path')
@click.option('--cache-dir', help='Directory for cached holiday data')
@click.option('--debug', is_flag=True, help='Enable debug mode with verbose logging')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              default='WARNING', help='Set logging level')
@click.option('--log-format', type=click.Choice(['simple', 'detailed', 'json', 'structured']),
              default='simple', help='Set log format')
@click.option('--enable-monitoring', is_flag=True, help='Log duration and memory use of the lookup')
def cli(country_code: str, relative_to: Optional[date], number: Optional[int],
        config: Optional[str], cache_dir: Optional[str], debug: bool,
        log_level: str, log_format: str, enable_monitoring: bool):
    """Show the next public holidays for COUNTRY_CODE.

    COUNTRY_CODE must be one of the codes listed at https://date.nager.at/Country.

    Examples:
      holidate us
      holidate de --number 10 --relative-to 2024-12-01
    """
    setup_logging(
        log_level=getattr(LogLevel, log_level),
        log_format=getattr(LogFormat, log_format.upper()),
        enable_performance_monitoring=enable_monitoring,
        debug_mode=debug
    )

    try:
        settings = Config(config)
        if cache_dir:
            settings.set('cache.directory', cache_dir)

        holidays = next_holidays(
            validate_country_code_input(country_code),
            relative_to or date.today(),
            number or settings.get_default_quantity(),
            cache_dir=settings.get_cache_dir(),
            api_url=settings.get_api_url(),
            max_years=settings.get_max_years()
        )
    except ValidationError as e:
        click.echo(f"Validation Error: {e.get_user_message()}", err=True)
        raise click.Abort()
    except BaseApplicationError as e:
        click.echo(f"Error: {e.get_user_message()}", err=True)
        raise click.Abort()
    finally:
        cleanup_logging()

    for holiday in holidays:
        click.echo(format_holiday(holiday))
