"""Chat transcript, input line and prefix parsing for the main screen."""

from __future__ import annotations

from dataclasses import dataclass, field

from hub_tui.form import is_printable

ROLE_USER = "user"
ROLE_HUB = "hub"
ROLE_SYSTEM = "system"

PREFIX_NONE = ""
PREFIX_ASSISTANT = "@"
PREFIX_WORKFLOW = "#"
PREFIX_COMMAND = "/"

KNOWN_COMMANDS = [
    "exit",
    "clear",
    "help",
    "hub",
    "refresh",
    "modules",
    "integrations",
    "workflows",
    "tasks",
    "settings",
]


@dataclass
class ChatMessage:
    role: str
    content: str = ""
    streaming: bool = False
    stream_id: int = 0


@dataclass(frozen=True)
class SlashCommand:
    name: str
    args: str = ""


def detect_prefix(text: str) -> tuple[str, str]:
    text = text.strip()
    if text and text[0] in (PREFIX_ASSISTANT, PREFIX_WORKFLOW, PREFIX_COMMAND):
        return text[0], text[1:]
    return PREFIX_NONE, text


def parse_command(text: str) -> SlashCommand | None:
    prefix, rest = detect_prefix(text)
    if prefix != PREFIX_COMMAND:
        return None
    name, _, args = rest.partition(" ")
    return SlashCommand(name=name.lower(), args=args.strip())


def filter_suggestions(items: list[str], partial: str) -> list[str]:
    if not partial:
        return list(items)
    needle = partial.lower()
    return [item for item in items if needle in item.lower()]


@dataclass
class Conversation:
    messages: list[ChatMessage] = field(default_factory=list)
    input: str = ""
    cursor: int = 0
    suggestions: list[str] = field(default_factory=list)
    suggestion_index: int = 0
    suggestion_prefix: str = PREFIX_NONE

    # transcript

    def add_user(self, text: str) -> None:
        self.messages.append(ChatMessage(ROLE_USER, text))

    def add_system(self, text: str) -> None:
        self.messages.append(ChatMessage(ROLE_SYSTEM, text))

    def open_stream(self, stream_id: int) -> ChatMessage:
        message = ChatMessage(ROLE_HUB, "", streaming=True, stream_id=stream_id)
        self.messages.append(message)
        return message

    def hub_message(self, stream_id: int) -> ChatMessage | None:
        for message in reversed(self.messages):
            if message.role == ROLE_HUB and message.stream_id == stream_id:
                return message
        return None

    def append_chunk(self, stream_id: int, content: str) -> bool:
        message = self.hub_message(stream_id)
        if message is None or not message.streaming:
            return False
        message.content += content
        return True

    def finish(self, stream_id: int) -> None:
        message = self.hub_message(stream_id)
        if message is not None:
            message.streaming = False

    def set_content(self, stream_id: int, content: str) -> None:
        message = self.hub_message(stream_id)
        if message is None:
            self.messages.append(ChatMessage(ROLE_HUB, content, stream_id=stream_id))
            return
        message.content = content
        message.streaming = False

    def append_line(self, stream_id: int, text: str) -> None:
        message = self.hub_message(stream_id)
        if message is None:
            self.messages.append(ChatMessage(ROLE_HUB, text, stream_id=stream_id))
            return
        message.content = f"{message.content}\n\n{text}" if message.content else text

    def freeze(self) -> None:
        for message in self.messages:
            message.streaming = False

    @property
    def streaming(self) -> bool:
        return any(m.streaming for m in self.messages)

    def clear(self) -> None:
        self.messages.clear()

    # input line

    def take_input(self) -> str:
        text = self.input.strip()
        self.input = ""
        self.cursor = 0
        self.hide_suggestions()
        return text

    def edit(self, key: str) -> bool:
        if key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.input), self.cursor + 1)
        elif key == "home":
            self.cursor = 0
        elif key == "end":
            self.cursor = len(self.input)
        elif key == "backspace":
            if self.cursor > 0:
                self.input = self.input[: self.cursor - 1] + self.input[self.cursor:]
                self.cursor -= 1
        elif key == "delete":
            self.input = self.input[: self.cursor] + self.input[self.cursor + 1:]
        elif is_printable(key):
            self.input = self.input[: self.cursor] + key + self.input[self.cursor:]
            self.cursor += 1
        else:
            return False
        return True

    # autocomplete

    @property
    def suggesting(self) -> bool:
        return bool(self.suggestions)

    def show_suggestions(self, prefix: str, suggestions: list[str]) -> None:
        self.suggestion_prefix = prefix
        self.suggestions = list(suggestions)
        self.suggestion_index = 0

    def hide_suggestions(self) -> None:
        self.suggestions = []
        self.suggestion_index = 0

    def move_suggestion(self, step: int) -> None:
        if self.suggestions:
            self.suggestion_index = (self.suggestion_index + step) % len(self.suggestions)

    def complete(self) -> None:
        if not self.suggestions:
            return
        choice = self.suggestions[self.suggestion_index]
        self.input = f"{self.suggestion_prefix}{choice} "
        self.cursor = len(self.input)
        self.hide_suggestions()
