from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from storefront.models.notification import Notification
from storefront.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification store: per-user messages and their read state"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: int,
        message: str,
        product_id: Optional[int] = None,
        commit: bool = True
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            product_id=product_id,
            message=message,
            read=False
        )
        self.db.add(notification)
        if commit:
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def list_for_user(self, user_id: int) -> List[Notification]:
        """Newest first"""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id
        ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def unread_count(self, user_id: int) -> int:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read.is_(False)
        ).count()

    def mark_read(self, notification_id: int, user_id: int) -> Notification:
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()

        # Another user's notification is reported as missing, not forbidden
        if not notification:
            raise NotFoundError("Notification not found", notification_id=notification_id)

        if not notification.read:
            notification.read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        updated = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read.is_(False)
        ).update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        logger.info(f"Marked {updated} notifications as read for user {user_id}")
        return updated
