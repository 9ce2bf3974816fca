#!/usr/bin/env python3
"""
Audit Report Assistant - Main Entry Point

Usage:
    python main.py parse "request"         # Parse one request into filters (JSON)
    python main.py chat --data actions.csv # Interactive report chat
    python main.py setup                   # Validate configuration
"""
import os
import sys
import json
import argparse
import logging
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

logger = logging.getLogger(__name__)


def setup_environment():
    """Load environment variables from .env file if present."""
    env_file = PROJECT_ROOT / '.env'
    if env_file.exists():
        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    os.environ.setdefault(key.strip(), value.strip())


def setup_logging(level: str):
    """Configure logging to stderr and the assistant log file."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler('assistant.log'),
        ]
    )


def _seeded_rng(config):
    import random
    from auditbot.core.responses import seed_replies

    if config.chat.reply_seed is None:
        return None
    seed_replies(config.chat.reply_seed)
    return random.Random(config.chat.reply_seed)


def _load_previous(raw):
    from auditbot.core.error_taxonomy import ReportAssistantError, ErrorCategory

    if not raw:
        return None
    try:
        previous = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ReportAssistantError(
            f"--previous is not valid JSON: {e}",
            category=ErrorCategory.INVALID_PREVIOUS_FILTERS,
        ) from e
    if not isinstance(previous, dict):
        raise ReportAssistantError(
            "--previous must be a JSON object",
            category=ErrorCategory.INVALID_PREVIOUS_FILTERS,
        )
    return previous


def cmd_parse(args):
    """Parse a single request and print the result as JSON."""
    from config.settings import get_config
    from auditbot.core.report_parser import ReportRequestParser
    from auditbot.data.actions import load_available_options

    options = load_available_options(args.options)
    previous = _load_previous(args.previous)

    parser = ReportRequestParser(rng=_seeded_rng(get_config()))
    result = parser.parse(args.request, options, previous)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


def chat_command(text, session):
    """Answer the chat loop's own commands, "history" and "reset"; None for a report request."""
    command = text.strip().lower()
    if command == "reset":
        dropped = session.forget_filters()
        if not dropped:
            return "No filters were being carried over."
        return f"Forgot {dropped}. The next request starts fresh."
    if command == "history":
        turns = session.recent_turns()
        if not turns:
            return "No messages yet."
        lines = []
        for turn in turns:
            line = f"  [{turn.timestamp:%H:%M:%S}] {turn.role}: {turn.content}"
            if turn.filters:
                line += f"  {turn.filters}"
            lines.append(line)
        return "\n".join(lines)
    return None


def cmd_chat(args):
    """Run the interactive report chat over an action table."""
    from config.settings import get_config
    from auditbot.agents.report_assistant import ReportAssistant
    from auditbot.data.actions import load_actions

    config = get_config()
    data_path = args.data or config.data.actions_path
    if not data_path:
        print("No action data given. Use --data FILE or set ACTIONS_DATA_PATH.")
        sys.exit(1)

    actions = load_actions(data_path)
    assistant = ReportAssistant(
        actions,
        output_dir=args.output_dir or config.export.output_dir,
        rng=_seeded_rng(config),
    )
    session = assistant.new_session()

    print("\n" + "="*60)
    print(f"AUDIT REPORT ASSISTANT ({len(actions)} actions loaded)")
    print("="*60)
    print('Try: "How many actions with Critical risk?" or "Export all actions with Open status"')
    print("Type 'history' to see recent messages, 'reset' to drop the previous filters, 'quit' to exit.\n")

    while True:
        try:
            request = input("You: ").strip()
        except EOFError:
            break
        if request.lower() in ("quit", "exit", "q"):
            break
        if not request:
            continue

        reply = chat_command(request, session)
        if reply is not None:
            print(f"Bot: {reply}\n")
            continue

        response = assistant.handle(request, session)
        print(f"Bot: {response.message}")
        if response.file_path:
            print(f"     📥 {response.file_path}")
        elif response.export_params and response.export_params.uses_backend_filtering():
            print(f"     Export parameters: {response.export_params.to_query_params()}")
        print()

    assistant.end_session(session)


def cmd_setup(args):
    """Validate configuration and setup."""
    from config.settings import get_config
    from auditbot.core.data_context import get_data_context

    print("\n" + "="*60)
    print("CONFIGURATION VALIDATION")
    print("="*60)

    config = get_config()

    print(f"\n📦 Action Data:")
    data_path = config.data.actions_path
    if data_path:
        exists = Path(data_path).exists()
        status = "✅" if exists else "❌"
        print(f"   {status} ACTIONS_DATA_PATH: {data_path}{'' if exists else ' (not found)'}")
    else:
        print("   ❌ ACTIONS_DATA_PATH: MISSING (pass --data to chat instead)")
    print(f"   Loaded audit year: {config.data.loaded_year}")

    print(f"\n📊 Export:")
    print(f"   Output directory: {config.export.output_dir}")
    print(f"   Role: {config.export.role}")

    print(f"\n💬 Chat:")
    seed = config.chat.reply_seed
    print(f"   Reply seed: {seed if seed is not None else 'random'}")
    print(f"   History turns: {config.chat.max_history}")

    print(f"\n📖 Data Dictionary:")
    context = get_data_context()
    for field_name, aliases in context.get_column_aliases().items():
        print(f"   {field_name}: {', '.join(aliases)}")

    print("\n" + "="*60)


def main():
    setup_environment()

    from config.settings import get_config
    setup_logging(get_config().log_level)

    parser = argparse.ArgumentParser(
        description="Audit Report Assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py parse "Completed actions for year 2023"
  python main.py parse "export them" --previous '{"status": "Open"}'
  python main.py chat --data actions.csv
  python main.py setup

Environment Variables:
  ACTIONS_DATA_PATH     Default action table for chat (CSV, XLSX, JSON)
  REPORT_OUTPUT_DIR     Where Excel reports are written (default: .outputs)
  EXPORT_ROLE           Role sent with export requests (default: all)
  LOADED_AUDIT_YEAR     Year filter of the loaded data (default: 2024+)
  CHAT_MAX_HISTORY      Turns kept per chat session (default: 20)
  REPLY_SEED            Seed for reproducible replies
  LOG_LEVEL             Logging level (default: INFO)
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Parse command
    parse_parser = subparsers.add_parser('parse', help='Parse one request')
    parse_parser.add_argument('request', help='Report request text')
    parse_parser.add_argument('--options', help='YAML/JSON file with available options')
    parse_parser.add_argument('--previous', help='Previous filters as a JSON object')
    parse_parser.set_defaults(func=cmd_parse)

    # Chat command
    chat_parser = subparsers.add_parser('chat', help='Interactive report chat')
    chat_parser.add_argument('--data', help='Action table (CSV, XLSX, JSON)')
    chat_parser.add_argument('--output-dir', help='Directory for Excel reports')
    chat_parser.set_defaults(func=cmd_chat)

    # Setup command
    setup_parser = subparsers.add_parser('setup', help='Validate setup')
    setup_parser.set_defaults(func=cmd_setup)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        from auditbot.core.error_taxonomy import classify_error
        classified = classify_error(e, pipeline_phase=args.command)
        logger.error(f"Error: {classified.message}", exc_info=True)
        print(classified.user_message)
        sys.exit(1)


if __name__ == "__main__":
    main()
