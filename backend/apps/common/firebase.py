"""Firebase Admin app bootstrap shared by the Firestore adapter."""

import firebase_admin
from firebase_admin import credentials
from django.conf import settings

from apps.common import get_logger

logger = get_logger(__name__).bind(component="common", layer="firebase")


def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase Admin app, initializing it on first use.

    Credentials come from FIREBASE_CREDENTIALS_PATH when set, otherwise from
    Application Default Credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred_path = settings.FIREBASE_CREDENTIALS_PATH
    if cred_path:
        cred = credentials.Certificate(cred_path)
    else:
        cred = credentials.ApplicationDefault()
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info(
        "Firebase Admin SDK initialized",
        project_id=settings.FIREBASE_PROJECT_ID or None,
        service_account=bool(cred_path),
    )
    return app
