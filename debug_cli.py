#!/usr/bin/env python3
"""
Command-line debug interface for the chart assistant.
Lets you talk to the backend from a terminal and drive the chart
presentation of each bot message (visualize, pick a kind, save the PNG).
"""

import asyncio
import signal
import sys

import config
from chart_renderer import ChartRenderer
from chart_state import presentation_state
from chart_types import Message
from chat_api import ChatApiClient
from chat_session import ChatSession
from config_validator import validate_config
from conversation_store import ConversationStore
from error_handler import ErrorContext, ErrorSeverity
from field_legend import format_legend, get_categories, get_fields, resolve_category
from logging_config import logger
from rate_limiter import FixedWindowRateLimiter


class DebugCLI:
    """Command-line interface for debugging a chat session"""

    def __init__(self, session: ChatSession, renderer: ChartRenderer = None):
        self.session = session
        self.renderer = renderer or ChartRenderer()
        self.running = True

    def print_welcome(self):
        """Print welcome message and instructions"""
        print("=" * 60)
        print("📊 Chart Assistant Debug CLI")
        print("=" * 60)
        print(f"Conversation: {self.session.conversation_id}")
        print(f"Backend: {self.session.api_client.url}")
        print()
        print("Type a message to send it. Lines starting with '.' are CLI commands;")
        print("use .help to list them.")
        print("=" * 60)
        print()

    def print_help(self):
        """Print help message"""
        print()
        print("🔧 Chart Commands (n = message number shown in brackets):")
        print("  .visualize <n>        - Accept the chart suggested for message n")
        print("  .chart <n> <kind>     - Render message n as bar, line, area or pie")
        print("                          Example: .chart 2 line")
        print("  .save <n> <file.png>  - Save the rendered chart of message n")
        print()
        print("📋 Dataset Fields:")
        print("  .fields [category]    - List the fields you can ask about")
        print("                          Example: .fields metricas")
        print()
        print("🛠️  CLI Controls:")
        print("  .clear                - Clear the transcript")
        print("  .reset                - Clear the transcript and start a new conversation")
        print("  .help                 - Show this help")
        print("  .quit or .exit        - Exit the debug interface")
        print()

    def describe_message(self, index: int, message: Message) -> str:
        """One-block description of a message and its chart state."""
        lines = [f"[{index}] {message.role}: {message.content}"]
        state = presentation_state(message)

        if message.chart_suggestion is not None:
            lines.append(f"    💡 Chart available ({len(message.chart_suggestion.dataset)} points). Use .visualize {index}")
        if message.chart_options is not None and message.chart_spec is None:
            kinds = ', '.join(kind.value for kind in message.chart_options.available_kinds)
            lines.append(f"    📊 Choose a chart: {kinds}. Use .chart {index} <kind>")
        if message.chart_spec is not None:
            spec = message.chart_spec
            lines.append(f"    ✅ Rendered as {spec.kind.value}: {spec.title or ''} ({len(spec.dataset)} points)")

        logger.debug(f"Message {message.id} state: {state}")
        return '\n'.join(lines)

    def _message_at(self, raw_index: str):
        try:
            index = int(raw_index)
        except ValueError:
            print(f"❌ '{raw_index}' is not a message number")
            return None
        if not 0 <= index < len(self.session.messages):
            print(f"❌ No message [{index}]")
            return None
        return self.session.messages[index]

    def _print_message(self, message: Message):
        index = self.session.messages.index(message)
        print(self.describe_message(index, message))

    def handle_cli_command(self, command: str) -> bool:
        """
        Handle CLI-specific commands (starting with .)

        Args:
            command: The command to handle

        Returns:
            True if command was handled, False if it is unknown
        """
        parts = command.strip().split()
        name, args = parts[0], parts[1:]

        if name in ['.quit', '.exit']:
            print("👋 Goodbye!")
            self.running = False
            return True

        elif name == '.help':
            self.print_help()
            return True

        elif name == '.visualize' and len(args) == 1:
            message = self._message_at(args[0])
            if message is not None:
                updated = self.session.visualize(message.id)
                if updated is message:
                    print("❌ That message has no chart suggestion")
                else:
                    self._print_message(updated)
            return True

        elif name == '.chart' and len(args) == 2:
            message = self._message_at(args[0])
            if message is not None:
                updated = self.session.select_chart_kind(message.id, args[1])
                if updated.chart_spec is None or updated.chart_spec.kind.value != args[1].lower():
                    print(f"❌ Chart kind '{args[1]}' is not available for that message")
                else:
                    self._print_message(updated)
            return True

        elif name == '.save' and len(args) == 2:
            message = self._message_at(args[0])
            if message is not None:
                self.save_chart(message, args[1])
            return True

        elif name == '.fields' and len(args) <= 1:
            category = args[0] if args else None
            if category is not None and resolve_category(category) is None:
                print(f"❌ Unknown category '{category}'. Choose one of: {', '.join(get_categories())}")
            else:
                print(format_legend(get_fields(category), category))
            return True

        elif name == '.clear':
            if self.session.clear():
                print("✅ Transcript cleared")
            return True

        elif name == '.reset':
            if self.session.reset_conversation():
                print(f"✅ New conversation: {self.session.conversation_id}")
            return True

        print(f"❌ Unknown command: {command.strip()}. Use .help")
        return False

    def save_chart(self, message: Message, filename: str) -> bool:
        if message.chart_spec is None:
            print("❌ That message has no rendered chart. Use .chart first")
            return False

        buf = self.renderer.render(message.chart_spec)
        if buf is None:
            print("❌ Chart rendering failed, see the log for details")
            return False

        with ErrorContext(f"Saving chart to {filename}", ErrorSeverity.MEDIUM, reraise=False) as ctx:
            with open(filename, 'wb') as f:
                f.write(buf.getvalue())
        if ctx.error is not None:
            print(f"❌ Could not write {filename}: {ctx.error}")
            return False

        print(f"✅ Chart saved to {filename}")
        return True

    async def process_input(self, user_input: str):
        """Process user input and send it to the backend"""
        user_input = user_input.strip()

        if not user_input:
            return

        if user_input.startswith('.'):
            self.handle_cli_command(user_input)
            return

        print("⏳ Waiting for the assistant...")
        reply = await self.session.send_message(user_input)
        if reply is None:
            print("⚠️  A request is already pending")
            return
        self._print_message(reply)

    async def run(self):
        """Main CLI loop"""
        self.print_welcome()

        # Set up signal handler for graceful shutdown
        def signal_handler(signum, frame):
            print("\n🛑 Received interrupt signal. Shutting down...")
            self.running = False

        signal.signal(signal.SIGINT, signal_handler)

        try:
            while self.running:
                try:
                    user_input = await asyncio.to_thread(input, "[você] > ")
                    await self.process_input(user_input)

                except EOFError:
                    # Handle Ctrl+D
                    print("\n👋 Goodbye!")
                    break

        except Exception as e:
            print(f"❌ Unexpected error in CLI: {e}")
            logger.error(f"Unexpected CLI error: {e}", exc_info=True)

        print("🔄 Debug CLI shutting down...")


def build_session() -> ChatSession:
    """Wire a session from the validated configuration."""
    validate_config(config)
    return ChatSession(
        api_client=ChatApiClient(config.webhook_url, config.request_timeout_seconds),
        store=ConversationStore(config.conversation_db_path),
        rate_limiter=FixedWindowRateLimiter(config.rate_limit_max_requests, config.rate_limit_window_seconds),
    )


async def main():
    """Main entry point"""
    cli = DebugCLI(build_session())
    await cli.run()


def cli_entry():
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry()
