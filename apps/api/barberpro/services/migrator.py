import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from barberpro.core.config import get_settings
from barberpro.core.errors import (
    BackendUnavailableError,
    BarberProError,
    MissingDependencyError,
    is_already_exists,
)

logger = logging.getLogger(__name__)

BUNDLED_SQL = Path(__file__).resolve().parents[1] / "sql" / "auto_setup_complete.sql"
DOLLAR_QUOTE = "$$"


@dataclass
class MigrationResult:
    applied_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    total: int = 0
    halted: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        # Forced runs are tolerated while fewer than half of the statements fail
        if self.error_count == 0:
            return True
        return not self.halted and self.error_count < self.total / 2


def split_statements(sql_text: str) -> List[str]:
    """Split a SQL script into statements, in file order.

    Blank lines and ``--`` comment lines are dropped; a statement ends on a line
    ending with ``;`` unless that line sits inside a ``$$`` body.
    """
    statements = []
    current = []
    in_body = False

    for line in sql_text.splitlines():
        stripped = line.strip()
        if not in_body and (not stripped or stripped.startswith("--")):
            continue

        current.append(line)
        if line.count(DOLLAR_QUOTE) % 2 == 1:
            in_body = not in_body

        if not in_body and stripped.endswith(";"):
            statements.append("\n".join(current).strip())
            current = []

    tail = "\n".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def load_migration_sql(path: Optional[str] = None) -> str:
    sql_path = Path(path or get_settings().migration_sql_path or BUNDLED_SQL)
    if not sql_path.is_file():
        raise MissingDependencyError(
            f"Migration script not found at {sql_path}. Restore auto_setup_complete.sql or set MIGRATION_SQL_PATH."
        )
    return sql_path.read_text(encoding="utf-8")


def _preview(statement: str) -> str:
    return statement[:50].replace("\n", " ") + "..."


def apply_migration(backend, sql_text: str, force: bool = False, pause: Optional[float] = None) -> MigrationResult:
    """Execute every statement of ``sql_text`` sequentially.

    "already exists"/"duplicate key" failures count as skipped. Any other failure
    stops the run unless ``force`` is set; connectivity failures always stop it.
    """
    if pause is None:
        pause = get_settings().migration_pause_seconds

    statements = split_statements(sql_text)
    result = MigrationResult(total=len(statements))
    logger.info("📝 Found %d SQL statements to run\n", result.total)

    for i, statement in enumerate(statements, start=1):
        logger.info("[%d/%d] %s", i, result.total, _preview(statement))
        try:
            backend.exec_sql(statement)
        except BackendUnavailableError as e:
            logger.error("   ❌ Backend unavailable: %s", e)
            result.error_count += 1
            result.errors.append(str(e))
            result.halted = True
            break
        except BarberProError as e:
            if is_already_exists(str(e)):
                logger.info("   ⚠️  Already exists - skipping")
                result.skipped_count += 1
            else:
                logger.error("   ❌ Error: %s", e)
                result.error_count += 1
                result.errors.append(str(e))
                if not force:
                    logger.info("\n💡 Use --force to continue past errors")
                    result.halted = True
                    break
        else:
            logger.info("   ✅ Applied")
            result.applied_count += 1

        if pause and i < result.total:
            time.sleep(pause)

    return result


def log_summary(result: MigrationResult) -> None:
    logger.info("\n" + "=" * 50)
    logger.info("📊 MIGRATION SUMMARY:")
    logger.info("   ✅ Applied: %d", result.applied_count)
    logger.info("   ⚠️  Skipped: %d", result.skipped_count)
    logger.info("   ❌ Errors: %d", result.error_count)
    logger.info("   📝 Total: %d", result.total)

    if result.error_count == 0:
        logger.info("\n🎉 MIGRATION COMPLETED SUCCESSFULLY!")
    elif result.succeeded:
        logger.info("\n⚠️  MIGRATION COMPLETED WITH WARNINGS")
        logger.info("💡 Some statements failed, but the database may still be usable")
    else:
        logger.info("\n❌ MIGRATION FAILED")


def run_auto_migration(backend, force: bool = False, sql_path: Optional[str] = None) -> MigrationResult:
    logger.info("🚀 BARBERPRO - Auto Migration Runner\n")
    sql_text = load_migration_sql(sql_path)
    result = apply_migration(backend, sql_text, force=force)
    log_summary(result)
    return result
