import os
import json
import logging
import firebase_admin
from firebase_admin import credentials

from selfiq.core.settings import settings

logger = logging.getLogger("selfiq.config")


def init_firebase():
    """Initialize the Firebase admin SDK used to verify client ID tokens.

    Credentials come from ``FIREBASE_CERT_JSON`` (inline service account
    JSON) first, then the file at ``settings.firebase_cert_path``. Without
    either, initialization is skipped and only the development mock tokens
    in ``selfiq.services.auth`` can authenticate.
    """
    if firebase_admin._apps:
        return

    fb_json = os.environ.get("FIREBASE_CERT_JSON")
    if fb_json:
        try:
            firebase_admin.initialize_app(credentials.Certificate(json.loads(fb_json)))
            logger.info("Firebase initialized from FIREBASE_CERT_JSON")
            return
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to init Firebase from FIREBASE_CERT_JSON: {e}")

    fb_path = settings.firebase_cert_path
    if fb_path and os.path.exists(fb_path):
        try:
            firebase_admin.initialize_app(credentials.Certificate(fb_path))
            logger.info(f"Firebase initialized from {fb_path}")
            return
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to init Firebase from path {fb_path}: {e}")

    logger.warning("No Firebase credentials found; only development tokens will authenticate")
