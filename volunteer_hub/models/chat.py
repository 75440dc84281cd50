# volunteer_hub/models/chat.py

from sqlalchemy import Index, UniqueConstraint

from .base import BaseModel, db


class ChatMessage(BaseModel):
    """Message posted to an event's discussion"""

    __tablename__ = "chat_messages"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    volunteer_id = db.Column(db.Integer, db.ForeignKey("volunteers.id"), nullable=True, index=True)
    volunteer_name = db.Column(db.String(200), nullable=False)
    body = db.Column(db.Text, nullable=False)
    # Opaque id chosen by the sender; unique per volunteer so a resend is recognised
    client_ref = db.Column(db.String(64), nullable=True)

    event = db.relationship("Event", back_populates="messages")
    volunteer = db.relationship("Volunteer")

    __table_args__ = (
        Index("idx_chat_event_created", "event_id", "created_at"),
        UniqueConstraint("volunteer_id", "client_ref", name="uq_chat_volunteer_client_ref"),
    )

    def __repr__(self):
        return f"<ChatMessage {self.id} event={self.event_id}>"
