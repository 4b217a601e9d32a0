import atexit
import sys
from . import create_app
from .errors import GalleryError
from .utils.logging import logger


def main():
    try:
        app = create_app()
    except GalleryError as e:
        logger.critical(f"Startup aborted [{e.kind.value}]: {e.detail}")
        sys.exit(1)
    atexit.register(app.extensions["gallery"]["store"].close)
    port = app.config["PORT"]
    logger.info(f"Server is listening at http://localhost:{port}")
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
