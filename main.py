"""Character Chat — dev launcher. Starts the API backend in watch mode."""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def main():
    parser = argparse.ArgumentParser(description="Character Chat dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--migrate", action="store_true",
                        help="Run pending state migrations and exit")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.migrate:
        from character_chat.state import is_error_state, reload_state
        from character_chat.storage import Storage
        state = reload_state(Storage(args.data_dir or ROOT / "data"))
        if is_error_state(state):
            print(state.volatile_state.error_message, file=sys.stderr)
            sys.exit(1)
        print(f"State is at version {state.version}")
        return

    # Build env for the subprocess so the backend picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    print(f"Starting backend on http://localhost:{PORT} ...")
    proc = subprocess.Popen(
        ["uvicorn", "backend.app:app", "--reload", "--host", HOST, "--port", PORT,
         "--log-level", LOG_LEVEL.lower()],
        cwd=ROOT, env=env,
    )
    try:
        proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
        proc.terminate()
        proc.wait()


if __name__ == "__main__":
    main()
