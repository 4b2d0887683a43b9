"""Command line interface for listkeeper.

Usage:
    listkeeper login                 # Log in once and save the browser profile
    listkeeper login --headed        # Same, with a visible browser
    listkeeper chat                  # Chat with the assistant in the terminal
    listkeeper chat --direct         # Plain commands ("add milk"), no LLM
    listkeeper list                  # Print the shopping list
"""

import argparse
import asyncio
from datetime import datetime, timezone

from dotenv import load_dotenv

from listkeeper.core.config import load_config
from listkeeper.core.errors import ConfigError

LAST_LOGIN_KEY = "last_login_at"


async def run_login(args) -> int:
    """Open the store, log in, and save the context for later runs."""
    from listkeeper.app import build_app

    config = load_config()
    if args.headed:
        config = config.model_copy(
            update={"browser": config.browser.model_copy(update={"headless": False})}
        )

    app = build_app(config, direct=True, owner_id="cli")
    try:
        print("[Login] Checking store session...")
        await app.session.with_page(lambda page: asyncio.sleep(0))
        app.store.set_value(LAST_LOGIN_KEY, datetime.now(timezone.utc).isoformat())
        print(f"[Login] Logged in. State saved to {app.pool.state_path(config.store.context_name)}")
        return 0
    except Exception as e:
        print(f"[Login] Login failed: {e}")
        return 1
    finally:
        await app.close()


async def run_list(args) -> int:
    from listkeeper.app import build_app

    app = build_app(direct=True, owner_id="cli")
    try:
        result = await app.action.show_list("cli")
        print(result.message)
        return 0 if result.success else 1
    finally:
        await app.close()


async def run_chat(args) -> int:
    """Interactive console transport."""
    from listkeeper.app import build_app

    app = build_app(direct=args.direct, owner_id=args.user)
    user_id = app.handler.owner_id

    print("\n[Grocery List Assistant]")
    print("=" * 50)
    print("Mode: direct commands" if args.direct else f"Model: {app.config.llm.chat_model}")
    last_login = app.store.get_value(LAST_LOGIN_KEY)
    if last_login:
        print(f"Last login: {last_login}")
    print()
    print("Try commands like:")
    print("  - 'add milk and eggs'" if not args.direct else "  - 'add milk'")
    print("  - 'what's on my list?'" if not args.direct else "  - 'list'")
    print("  - 'pick 2'")
    print()
    print("Type 'quit' to exit, '/reset' to start over.\n")

    try:
        while True:
            try:
                user_input = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break

            if not user_input:
                continue
            if user_input.lower() in ["quit", "exit", "bye"]:
                print("Goodbye!")
                break

            reply = await app.handler.handle(user_id, user_input)
            if reply is not None:
                print(f"\nAssistant: {reply}\n")
    finally:
        await app.close()

    return 0


def main():
    """Entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="Chat-driven grocery list assistant")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Log in to the store and save the session")
    login_parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window while logging in",
    )

    chat_parser = subparsers.add_parser("chat", help="Chat with the assistant in the terminal")
    chat_parser.add_argument(
        "--direct",
        action="store_true",
        help="Use plain commands instead of the LLM",
    )
    chat_parser.add_argument(
        "--user",
        type=str,
        default=None,
        help="Sender id to chat as (default: OWNER_ID)",
    )

    subparsers.add_parser("list", help="Print the shopping list")

    args = parser.parse_args()
    commands = {"login": run_login, "chat": run_chat, "list": run_list}

    try:
        exit_code = asyncio.run(commands[args.command](args))
    except ConfigError as e:
        print(f"Error: {e}")
        print("Copy .env.example to .env and fill in the missing values.")
        exit_code = 2

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
