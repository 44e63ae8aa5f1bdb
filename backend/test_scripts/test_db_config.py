"""
Test Database Configuration

Manages test database setup and teardown.
Tests should use a separate database to avoid corrupting production/development data.

The test database URL is configured in config.py (TEST_DATABASE_URL).
Can be customized via environment variable.
"""
import os
from pathlib import Path

# App modules are imported inside the functions below: importing
# backend.app.main evaluates settings, which must happen after setup_test_database().

# Default test database URL (relative to project root)
DEFAULT_TEST_DATABASE_URL = "sqlite:///./backend/data/sqlite/test_app.db"

# Use environment override if present (allows CI or user to change path)
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)

# Project root and database directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Extract path from URL for file operations
# Handle both sqlite:///./path and sqlite:////absolute/path
if TEST_DATABASE_URL.startswith("sqlite:///"):
    TEST_DB_PATH = Path(TEST_DATABASE_URL.replace("sqlite:///", ""))
else:
    TEST_DB_PATH = Path(TEST_DATABASE_URL)
if not TEST_DB_PATH.is_absolute():
    TEST_DB_PATH = PROJECT_ROOT / TEST_DB_PATH

DB_DIR = TEST_DB_PATH.parent


def setup_test_database():
    """
    Configure environment to use test database.
    Must be called BEFORE importing any app modules that use DATABASE_URL.

    Also keeps test runs from writing the rotating log file.

    Returns:
        Path: Path to test database
    """
    DB_DIR.mkdir(parents=True, exist_ok=True)

    # Mirrors the --test flag: get_settings() returns TEST_DATABASE_URL as DATABASE_URL
    os.environ["KIDLEDGER_TEST_MODE"] = "1"
    os.environ["DATABASE_URL"] = TEST_DATABASE_URL
    os.environ["TEST_DATABASE_URL"] = TEST_DATABASE_URL
    os.environ.setdefault("LOG_TO_FILE", "false")

    # config may already be imported by an earlier test module
    from backend.app.config import set_test_mode
    set_test_mode(True)

    return TEST_DB_PATH


def cleanup_test_database():
    """
    Remove test database after tests complete.
    """
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


def get_test_db_path() -> Path:
    """Get the path to test database."""
    return TEST_DB_PATH


def is_test_database_configured() -> bool:
    """Check if test database is configured."""
    db_url = os.environ.get("DATABASE_URL", "")
    return db_url == TEST_DATABASE_URL


def verify_test_database() -> tuple[bool, str]:
    """
    Verify that we're using the test database.

    Returns:
        tuple: (is_test_db, database_url)
    """
    from backend.app.config import get_settings

    db_url = get_settings().DATABASE_URL
    is_test = "test_app" in db_url
    return is_test, db_url


def initialize_test_database(print_func=None):
    """
    Initialize test database with safety checks.

    This function:
    1. Verifies we're using test database (not production)
    2. Creates database schema if needed (via ensure_database_exists)
    3. Prints confirmation message

    Args:
        print_func: Optional print function. If None, uses standard print

    Returns:
        bool: True if initialization successful and using test DB, False otherwise
    """
    if print_func is None:
        print_func = print

    is_test, db_url = verify_test_database()

    if not is_test:
        print_func("⚠️  DANGER: Not using test database!")
        print_func(f"Current DATABASE_URL: {db_url}")
        print_func("Expected to contain: test_app.db")
        print_func("Aborting for safety - tests should only modify test database.")
        return False

    print_func(f"✅ Using test database: {db_url}")

    from backend.app.main import ensure_database_exists
    ensure_database_exists()
    return True
