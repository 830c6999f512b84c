# flask_app/routes/message.py

"""
Direct message and conversation API routes
"""

from flask import current_app
from flask_login import current_user, login_required

from flask_app.models import MessageType
from flask_app.services.message_service import MessageService
from flask_app.utils.api import api_response, get_json_body, require_int
from flask_app.utils.errors import ValidationFailed


def _parse_message_type(value):
    """Accept the numeric code or the lowercase name; defaults to text"""
    if value is None:
        return MessageType.TEXT
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return MessageType(value)
        except ValueError:
            pass
    elif isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return _parse_message_type(int(text))
        member = MessageType.__members__.get(text.upper())
        if member is not None:
            return member
    raise ValidationFailed("Invalid message type", errors=[{"field": "type", "error": "invalid"}])


def register_message_routes(app):
    """Register message routes"""

    @app.route("/api/message/send", methods=["POST"])
    @login_required
    def api_send_message():
        data = get_json_body()
        recipient_id = require_int(data, "recipientId")
        content = data.get("content")
        if not isinstance(content, str):
            raise ValidationFailed("content must be a string", errors=[{"field": "content", "error": "invalid"}])
        message_type = _parse_message_type(data.get("type"))

        message = MessageService.send(current_user.id, recipient_id, content, message_type)
        current_app.logger.debug(f"Send message API: message {message.id} by user {current_user.id}")
        return api_response(message.to_dict(), message="Message sent", status=201)

    @app.route("/api/message/conversations", methods=["GET"])
    @login_required
    def api_list_conversations():
        return api_response(MessageService.list_conversations(current_user.id).to_dict())

    @app.route("/api/message/conversation/<conversation_id>", methods=["GET"])
    @login_required
    def api_get_conversation(conversation_id):
        other_user_id = MessageService.resolve_counterpart(conversation_id, current_user.id)
        other_user, messages = MessageService.get_conversation(current_user.id, other_user_id)
        return api_response(
            {
                "conversationId": MessageService.conversation_id(current_user.id, other_user_id),
                "otherUser": other_user.to_summary(),
                "messages": [m.to_dict() for m in messages],
            }
        )

    @app.route("/api/message/conversation/<conversation_id>/read", methods=["PUT"])
    @login_required
    def api_mark_conversation_read(conversation_id):
        other_user_id = MessageService.resolve_counterpart(conversation_id, current_user.id)
        changed = MessageService.mark_conversation_read(current_user.id, other_user_id)
        return api_response({"updated": changed}, message="Conversation marked as read")

    @app.route("/api/message/stats", methods=["GET"])
    @login_required
    def api_message_stats():
        return api_response(MessageService.conversation_stats(current_user.id))
