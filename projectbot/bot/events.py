"""Transport-neutral inbound events and outbound replies.

The core never looks at transport payloads beyond these fields. Adapters
(see projectbot.telegram) convert raw updates into these objects and
render BotReply back into transport calls.
"""

from dataclasses import dataclass, field

from projectbot.services.user_service import CallerProfile


@dataclass(frozen=True)
class InlineButton:
    """Interactive button carrying an opaque callback token.

    Attributes:
        text: Button label.
        callback_data: Token returned to the bot when pressed.
    """

    text: str
    callback_data: str


# Rows of buttons, top to bottom.
InlineKeyboard = list[list[InlineButton]]


@dataclass(frozen=True)
class TextMessageEvent:
    """Text message from a caller.

    Attributes:
        caller: Verified caller identity and display fields.
        chat_id: Conversation to reply into.
        text: Raw message text.
    """

    caller: CallerProfile
    chat_id: int
    text: str


@dataclass(frozen=True)
class CallbackEvent:
    """Interactive-button press from a caller.

    Attributes:
        caller: Verified caller identity and display fields.
        chat_id: Conversation the button was rendered in.
        callback_id: Transport id used to acknowledge the press.
        data: Callback token string.
    """

    caller: CallerProfile
    chat_id: int
    callback_id: str
    data: str


@dataclass
class BotReply:
    """Text reply with an optional inline keyboard.

    Attributes:
        text: Message body.
        keyboard: Button rows, or empty for a plain message.
    """

    text: str
    keyboard: InlineKeyboard = field(default_factory=list)
