import argparse
import logging

from barberpro.cli.common import run
from barberpro.services.user_seeder import SEED_ACCOUNTS, seed_users

logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the test accounts, profiles and sample data (idempotent).")
    return parser.parse_args(argv)


def _seed(backend, settings) -> bool:
    report = seed_users(backend)
    if report.failed:
        logger.info("\n❌ Failed: %s", ", ".join(report.failed))
        return False

    logger.info("\n🎉 SEED COMPLETED SUCCESSFULLY!")
    logger.info("\n🔑 Test credentials:")
    for account in SEED_ACCOUNTS:
        logger.info("   %s: %s / %s", account.role.value, account.email, account.password)
    return report.succeeded


def main(argv=None) -> int:
    _parse_args(argv)
    return run(_seed)


if __name__ == "__main__":
    raise SystemExit(main())
