#  --- lokal/model/notification.py ---
from datetime import datetime
from ..extensions import db

class Notification(db.Model):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.String(1000), nullable=False)
    type = db.Column(db.String(32), nullable=False, default="other")
    data = db.Column(db.JSON)  # the push payload's data map
    url = db.Column(db.String(512))  # deep link resolved from data
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def as_api(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "body": self.body,
            "type": self.type,
            "data": self.data or {},
            "url": self.url,
            "isRead": bool(self.is_read),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class NotificationPreference(db.Model):
    __tablename__ = "notification_preferences"
    user_id = db.Column(db.String(128), primary_key=True)
    message_notifications = db.Column(db.Boolean, nullable=False, default=True)
    order_notifications = db.Column(db.Boolean, nullable=False, default=True)
    payment_notifications = db.Column(db.Boolean, nullable=False, default=True)
    review_notifications = db.Column(db.Boolean, nullable=False, default=True)

    # API name -> column
    FIELDS = {
        "messageNotifications": "message_notifications",
        "orderNotifications": "order_notifications",
        "paymentNotifications": "payment_notifications",
        "reviewNotifications": "review_notifications",
    }

    def as_api(self):
        # unsaved rows have no defaults applied yet
        return {name: getattr(self, col) is not False for name, col in self.FIELDS.items()}
