"""Audit service: append-only audit trail for sign-ins and mutations."""

import json
import logging
from typing import Optional, Any
from sqlalchemy.orm import Session
from fastapi import Request

from ideaportal.models.audit_log import AuditLog

logger = logging.getLogger("idea_portal.audit")


class AuditService:
    """Records immutable audit log entries for system events."""

    @staticmethod
    def log(
        db: Session,
        actor_id: Optional[int],
        actor_email: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[Any] = None,
        new_value: Optional[Any] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> AuditLog:
        """Write a single audit log record.

        Args:
            action: e.g. "user.login", "user.password_reset", "idea.created"
            resource_type: user, idea, campaign, system

        This method commits immediately to ensure audit is never lost.
        Never pass passwords or raw tokens in ``new_value``.
        """
        entry = AuditLog(
            actor_id=actor_id,
            actor_email=actor_email,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            new_value_json=json.dumps(new_value, default=str) if new_value else None,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
        )
        db.add(entry)
        db.commit()
        logger.info("%s %s:%s by %s", action, resource_type, entry.resource_id, actor_id)
        return entry

    @staticmethod
    def log_from_request(
        db: Session,
        request: Request,
        actor_id: Optional[int],
        actor_email: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[Any] = None,
        new_value: Optional[Any] = None,
    ) -> AuditLog:
        """Write audit log with IP, user-agent and request id taken from the request."""
        ip = request.client.host if request.client else None
        ua = request.headers.get("user-agent", "")[:500]
        return AuditService.log(
            db=db,
            actor_id=actor_id,
            actor_email=actor_email,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            new_value=new_value,
            ip_address=ip,
            user_agent=ua,
            request_id=getattr(request.state, "request_id", None),
        )

    @staticmethod
    def recent(
        db: Session,
        action: Optional[str] = None,
        actor_id: Optional[int] = None,
        limit: int = 50,
    ) -> list[AuditLog]:
        """Newest entries first, optionally filtered."""
        query = db.query(AuditLog)
        if action:
            query = query.filter(AuditLog.action.ilike(f"%{action}%"))
        if actor_id:
            query = query.filter(AuditLog.actor_id == actor_id)
        return query.order_by(AuditLog.id.desc()).limit(limit).all()


audit_service = AuditService()
