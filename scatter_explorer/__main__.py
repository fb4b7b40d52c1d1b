import os

from . import create_app


def main() -> None:
    app = create_app()
    host = os.environ.get("SCATTER_HOST", "127.0.0.1")
    port = int(os.environ.get("SCATTER_PORT", "5000"))
    app.run(host=host, port=port, debug=app.config.get("DEBUG", False))


if __name__ == "__main__":
    main()
