"""WSGI entry point for the frontend service."""

import os

from frontend_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))


def main() -> None:
    app.run(host="0.0.0.0", port=app.config["FRONTEND_PORT"])


if __name__ == "__main__":
    main()
