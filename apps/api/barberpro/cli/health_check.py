import argparse

from barberpro.cli.common import run
from barberpro.services.health_check import run_health_check, validate_pre_seed


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Check that the BarberPro tables and default data exist."
    )
    parser.add_argument("--fix", action="store_true", help="Repair the issues found")
    parser.add_argument(
        "--pre-seed",
        action="store_true",
        help="Full validation before seeding (migrates and creates default data)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    if args.pre_seed:
        return run(lambda backend, settings: validate_pre_seed(backend), with_auth=False)
    return run(lambda backend, settings: run_health_check(backend, auto_fix=args.fix), with_auth=False)


if __name__ == "__main__":
    raise SystemExit(main())
