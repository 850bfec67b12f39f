import argparse

from barberpro.cli.common import run
from barberpro.services.migrator import run_auto_migration


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply auto_setup_complete.sql statement by statement.")
    parser.add_argument("--force", action="store_true", help="Keep going after failed statements")
    parser.add_argument("--sql", dest="sql_path", help="Path to an alternative SQL script")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    return run(
        lambda backend, settings: run_auto_migration(backend, force=args.force, sql_path=args.sql_path).succeeded,
        with_auth=False,
    )


if __name__ == "__main__":
    raise SystemExit(main())
