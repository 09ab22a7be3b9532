from decouple import config, Csv
from exceptions import ConfigurationError


REQUIRED_STORAGE_KEYS = ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET")

# database config
MONGODB_URL = config("MONGODB_URL", default="mongodb://localhost:27017")
MONGODB_DATABASE = config("MONGODB_DATABASE", default="Catalog")

# app config
ENVIRONMENT = config("ENVIRONMENT", default="development")
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
CORS_ORIGINS = config("CORS_ORIGINS", default="*", cast=Csv())
UPLOAD_TIMEOUT_SECONDS = config("UPLOAD_TIMEOUT_SECONDS", default=120, cast=int)


def is_production() -> bool:
    return ENVIRONMENT.lower() == "production"


def load_storage_credentials(source=config) -> dict:
    """
    Reads the three object-storage secrets, failing fast when any of them is missing
    """
    values = {key: source(key, default="") for key in REQUIRED_STORAGE_KEYS}
    missing = [key for key, value in values.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required Cloudinary configuration: {', '.join(missing)}")
    return {
        "cloud_name": values["CLOUDINARY_CLOUD_NAME"],
        "api_key": values["CLOUDINARY_API_KEY"],
        "api_secret": values["CLOUDINARY_API_SECRET"],
    }


STORAGE_CREDENTIALS = load_storage_credentials()
