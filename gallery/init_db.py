import sys
from .config import load_config
from .errors import GalleryError
from .services.imageStore import ImageStore

if __name__ == "__main__":
    try:
        config = load_config()
    except GalleryError as e:
        print(f"Configuration error: {e.detail}")
        sys.exit(1)
    print("Creating database tables...")
    store = ImageStore(config["DATABASE_URL"], timeout=config["DATABASE_TIMEOUT"])
    store.create_tables()
    store.close()
    print("Database tables created successfully!")
