#!/usr/bin/env python3
"""
seed.py: run Alembic migrations and seed the default accounts for local dev
"""
import argparse, os, re, subprocess
from pathlib import Path

def read_env_value(dotenv: Path, key: str) -> str | None:
    if not dotenv.exists():
        return None
    pat = re.compile(rf"^\s*{re.escape(key)}\s*=\s*(.+?)\s*$")
    for line in dotenv.read_text(encoding="utf-8").splitlines():
        m = pat.match(line)
        if m:
            raw = m.group(1).strip().strip('"').strip("'")
            return raw
    return None

def ensure_database_url(repo_root: Path) -> str:
    url = os.getenv("DATABASE_URL") or read_env_value(repo_root / ".env", "DATABASE_URL")
    if not url:
        url = f"sqlite:///{repo_root / 'agri_energy.db'}"
    os.environ["DATABASE_URL"] = url
    return url

def run_alembic(repo_root: Path):
    print(">>> Running Alembic migrations")
    subprocess.run(["alembic", "upgrade", "head"], cwd=repo_root, check=True)

def seed():
    # imported late so the settings pick up DATABASE_URL set above
    from agri_api.core.config import settings
    from agri_api.db.session import SessionLocal
    from agri_api.db.seed import seed_defaults

    db = SessionLocal()
    try:
        seed_defaults(db, settings)
    finally:
        db.close()

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--skip-migrations", action="store_true", help="Only seed, assume the schema exists")
    args = ap.parse_args()

    repo_root = Path(__file__).resolve().parents[1]
    url = ensure_database_url(repo_root)
    print(f"Using DATABASE_URL = {url}")

    if not args.skip_migrations:
        run_alembic(repo_root)
    print(">>> Seeding default accounts")
    seed()
    print("Done.")

if __name__ == "__main__":
    main()
