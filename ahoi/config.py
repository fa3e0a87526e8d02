import logging
import os

# Not configurable: the Service and Ingress documents target this port.
LISTEN_ADDRESS = ("0.0.0.0", 8080)
CONTAINER_PORT = 8080


def log_level(value):
    """Returns a level name logging understands, INFO for anything else."""
    name = (value or "INFO").upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


LOG_LEVEL = log_level(os.getenv("LOG_LEVEL"))

APP_NAME = os.getenv("APP_NAME", "ahoi")
IMAGE = os.getenv("IMAGE", "ahoi:latest")

# Registry credentials for the image pull secret, e.g. a private registry
REGISTRY_SERVER = os.getenv("REGISTRY_SERVER", "https://index.docker.io/v1/")
REGISTRY_USER = os.getenv("REGISTRY_USER")
REGISTRY_PASSWORD = os.getenv("REGISTRY_PASSWORD")
REGISTRY_EMAIL = os.getenv("REGISTRY_EMAIL")
