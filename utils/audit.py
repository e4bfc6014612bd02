import json
import logging

from flask import current_app, request
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.audit_log import AuditLog
from security.rate_limit import client_ip

logger = logging.getLogger(__name__)


def log_event(action: str, username=None, metadata=None):
    """
    Record an admin auth event in the audit_logs table.

    Skipped when the app runs without a database. Never raises: an audit
    write must not change the outcome of the request that triggered it.
    """
    logger.info("%s username=%s metadata=%s", action, username, metadata)

    if "sqlalchemy" not in current_app.extensions:
        return

    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        username=username[:50] if username else None,
        action=action,
        ip=client_ip(request),
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata) if metadata else None
    )
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not write audit event %s", action)
