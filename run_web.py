#!/usr/bin/env python
"""Web server startup script for local development."""

import os
import sys
from pathlib import Path

from settingspage.config import Config
from settingspage.consts import LOG_FILENAME
from settingspage.log import setup as setup_log


def main():
    """Start the admin web server."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config.toml"

    if not Path(config_path).exists():
        print(f"Configuration file not found: {config_path}")
        sys.exit(1)

    config = Config.load_from_file(config_path)
    setup_log(Path(config.data_dir) / LOG_FILENAME)

    host = config.web.host
    port = config.web.port

    print(f"Starting admin server on http://{host}:{port}")
    print("Press Ctrl+C to stop")

    os.environ["CONFIG_FILE"] = config_path

    from settingspage.web import create_app

    app = create_app(config)
    app.run(host=host, port=port, debug=config.web.debug, use_reloader=False)


if __name__ == "__main__":
    main()
