import argparse
import logging

from barberpro.cli.common import run
from barberpro.core.logging_config import configure_logging
from barberpro.services.reset import reset_database

logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete all BarberPro rows and the seeded auth users.")
    parser.add_argument("--confirm", action="store_true", help="Required: acknowledge that data will be lost")
    return parser.parse_args(argv)


def _reset(backend, settings) -> bool:
    report = reset_database(backend, confirm=True)
    if report.succeeded:
        logger.info("\n🎉 Database reset. Run barberpro-auto-migrate and barberpro-seed-users to start over.")
    return report.succeeded


def main(argv=None) -> int:
    args = _parse_args(argv)
    if not args.confirm:
        configure_logging(console=True)
        logger.info("⚠️  This deletes every appointment, barber, service, profile and barbershop.")
        logger.info("💡 Re-run with --confirm to proceed.")
        return 1
    return run(_reset)


if __name__ == "__main__":
    raise SystemExit(main())
