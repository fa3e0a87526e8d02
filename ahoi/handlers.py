import socket

from flask import current_app


def index(request):
    """Greets every caller, whatever they sent."""
    return "Ahoi\n", 200


def hostname(request):
    """Reports which pod answered the request."""
    try:
        name = socket.gethostname()
    except OSError as e:
        current_app.logger.error(f"Could not get hostname: {e}")
        return "cannot get hostname\n", 200
    return f"Host: {name}\n", 200
