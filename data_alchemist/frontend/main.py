"""
Launcher for the Data Alchemist API and its Streamlit UI.

```
data-alchemist [server|ui|both]
```

``both`` is the default: the API runs in a background thread while
Streamlit runs in the foreground.  Ports come from ``PORT`` (API,
default 3001) and ``UI_PORT`` (Streamlit, default 8501); the log level
comes from ``LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
import time
from pathlib import Path

logger = logging.getLogger(__name__)

UI_PORT: str = os.getenv('UI_PORT', '8501')
SERVER_STARTUP_DELAY = 2


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def run_server() -> None:
    """Serve the cleaning API."""
    from data_alchemist.backend import server
    server.run()


def run_ui() -> None:
    """Serve the Streamlit pages on ``UI_PORT``."""
    app_path = Path(__file__).parent / "app.py"
    logger.info(f"Starting Streamlit UI on port {UI_PORT}")
    # Streamlit owns its own process and script runner
    subprocess.run([
        sys.executable, "-m", "streamlit", "run", str(app_path),
        "--server.port", UI_PORT,
        "--server.address", "0.0.0.0",
    ])


def run_both() -> None:
    api_thread = threading.Thread(target=run_server, name="data-alchemist-api", daemon=True)
    api_thread.start()
    time.sleep(SERVER_STARTUP_DELAY)
    run_ui()


COMMANDS = {
    "server": run_server,
    "ui": run_ui,
    "both": run_both,
}


def main() -> None:
    """Run the component named on the command line (default ``both``)."""
    configure_logging()
    command = sys.argv[1].lower() if len(sys.argv) > 1 else "both"
    runner = COMMANDS.get(command)
    if runner is None:
        sys.exit(f"Unknown command: {command}\nUsage: data-alchemist [{'|'.join(COMMANDS)}]")
    runner()


if __name__ == "__main__":
    main()
