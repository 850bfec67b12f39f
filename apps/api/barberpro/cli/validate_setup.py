import argparse

from barberpro.cli.common import run
from barberpro.services.setup_validation import validate_setup


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate environment, schema, seed data and test users.")
    parser.add_argument(
        "--skip-auth",
        action="store_true",
        help="Do not query the auth admin API (no service role key needed)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    return run(lambda backend, settings: validate_setup(backend, settings).ok, with_auth=not args.skip_auth)


if __name__ == "__main__":
    raise SystemExit(main())
