"""Write the local .env used by the Flask app and create the SQLite database."""
from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path
from typing import Dict

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from naskah import create_app
from naskah.extensions import db

DEFAULT_ENV_PATH = REPO_ROOT / ".env"
BACKUP_SUFFIX = ".bak"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create or update the .env file for local development and initialise the SQLite database."
    )
    parser.add_argument("--flask-app", default="wsgi.py", help="Entry point used by Flask (default: wsgi.py)")
    parser.add_argument("--secret-key", help="Secret key for Flask sessions and CSRF tokens.")
    parser.add_argument("--openai-api-key", help="API key used for document generation.")
    parser.add_argument("--openai-base-url", help="Alternative base URL for an OpenAI-compatible API (optional).")
    parser.add_argument("--generation-model", help="Model used for chapter generation (optional).")
    parser.add_argument("--database-url", help="Override DATABASE_URL (optional).")
    parser.add_argument(
        "--env-path",
        type=Path,
        default=DEFAULT_ENV_PATH,
        help="Path to the .env file that should be created/updated.",
    )
    parser.add_argument("--skip-db", action="store_true", help="Only update the .env file.")
    return parser.parse_args()


def read_env(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    data: Dict[str, str] = {}
    for line in path.read_text().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        data[key.strip()] = value.strip()
    return data


def write_env(path: Path, values: Dict[str, str]) -> None:
    if path.exists():
        backup_path = path.with_suffix(path.suffix + BACKUP_SUFFIX)
        shutil.copy(path, backup_path)
        print(f"Existing {path.name} backed up to {backup_path.name}.")
    path.write_text("".join(f"{key}={value}\n" for key, value in values.items()))
    print(f"Environment written to {path}.")


def update_env_file(args: argparse.Namespace) -> Dict[str, str]:
    env_data = read_env(args.env_path)
    optional = {
        "SECRET_KEY": args.secret_key,
        "OPENAI_API_KEY": args.openai_api_key,
        "OPENAI_BASE_URL": args.openai_base_url,
        "GENERATION_MODEL": args.generation_model,
        "DATABASE_URL": args.database_url,
    }
    env_data["FLASK_APP"] = args.flask_app
    env_data.update({key: value for key, value in optional.items() if value})
    write_env(args.env_path, env_data)
    return env_data


def initialize_database() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database ready ({app.config['SQLALCHEMY_DATABASE_URI']}).")


def _masked(key: str, value: str) -> str:
    if key in {"SECRET_KEY", "OPENAI_API_KEY"} and len(value) > 8:
        return value[:4] + "..." + value[-4:]
    return value


def main() -> None:
    args = parse_args()
    env_values = update_env_file(args)

    if args.skip_db:
        print("Database initialization skipped.")
    else:
        initialize_database()

    print("\nSetup complete! Summary:")
    for key in sorted(env_values):
        print(f"  {key}={_masked(key, env_values[key])}")


if __name__ == "__main__":
    main()
