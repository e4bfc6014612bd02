from models.db import db
from utils.clock import utcnow

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=True, index=True)  # nullable for anonymous events
    action = db.Column(db.String(80), nullable=False)  # e.g. LOGIN_FAIL, PASSWORD_CHANGED

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False)
