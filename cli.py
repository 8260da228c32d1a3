#!/usr/bin/env python3
"""Command-line client for the Unixora assistant: account, chat and matcher."""

import argparse
import asyncio
import getpass
import html
import sys
from pathlib import Path
from typing import Dict

import readline  # noqa: F401  # For command history and line editing

from unixora.config import get_settings
from unixora.core.logging import configure_logging
from unixora.client import JsonFileStorage, NotAuthenticatedError, SessionContext
from unixora.client.auth_client import AuthClient, AuthServiceError
from unixora.assistant.models.chat import Message, MessageType
from unixora.assistant.services import ConversationController, QueryServiceClient
from unixora.assistant.services.conversation_controller import render_message
from unixora.matcher.models import MatchForm, MatchResults
from unixora.matcher.services import (
    MatcherController, MatchServiceClient, card_sections, card_subtitle
)

CHAT_HELP = """Commands:
  /new            start a new chat
  /history        list recent chats
  /load N         open chat N from the history
  /delete N       delete chat N from the history
  /dismiss        hide the error banner
  /export FILE    save the current chat as HTML
  exit, quit, q   leave the chat"""


def get_context() -> SessionContext:
    return SessionContext(JsonFileStorage(get_settings().client_storage_path))


# ─────────────────────────── account commands ───────────────────────────
def signup_command(args) -> int:
    context = get_context()
    first_name = input("First name: ").strip()
    last_name = input("Last name (optional): ").strip()
    email = input("Email: ").strip()
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("Passwords do not match.")
        return 1

    try:
        asyncio.run(AuthClient(context).signup(first_name, last_name, email, password))
    except AuthServiceError as e:
        print(f"❌ {e.detail}")
        return 1
    print("✅ Account created successfully. Log in with: python cli.py login")
    return 0


def login_command(args) -> int:
    context = get_context()
    if context.token and not args.force:
        profile = context.profile or {}
        print(f"Already logged in as {profile.get('email', 'unknown')}. Use --force to log in again.")
        return 0

    email = input("Email: ").strip()
    password = getpass.getpass("Password: ")
    try:
        user = asyncio.run(AuthClient(context).login(email, password))
    except AuthServiceError as e:
        print(f"❌ {e.detail}")
        return 1
    print(f"✅ Welcome back, {user.get('firstName', '')}!")
    return 0


def logout_command(args) -> int:
    AuthClient(get_context()).logout()
    print("Logged out.")
    return 0


# ─────────────────────────── chat ───────────────────────────
def print_message(message: Message) -> None:
    if message.type is MessageType.USER:
        print(f"\n🧑 {message.text}")
        return

    print(f"\n{'⚠️' if message.is_error else '🤖'} {message.text}")
    if message.subtext:
        print(f"   {message.subtext}")
    if message.sources:
        print("\n📑 Sources:")
        for source in message.sources:
            label = f"{source.university} - {source.program}" if source.program else source.university
            print(f"  • {label}: {source.preview}")
    if message.confidence is not None:
        print(f"\n💡 Confidence: {round(message.confidence * 100)}%")


def print_history(controller: ConversationController) -> None:
    if not controller.sessions:
        print("No recent chats.")
        return
    for session in controller.sessions:
        marker = "*" if session.id == controller.active_session_id else " "
        print(f" {marker}{session.id:>3}  {session.title}  ({session.timestamp})")


def export_chat(controller: ConversationController, path: str) -> None:
    body = "\n".join(
        f'<div class="message {m.type.value}">{render_message(m)}</div>' for m in controller.messages
    )
    title = html.escape(controller.profile.get("firstName", ""))
    Path(path).write_text(
        f"<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\"><title>Unixora chat - {title}</title></head>"
        f"<body>\n{body}\n</body></html>\n",
        encoding="utf-8"
    )
    print(f"Saved {len(controller.messages)} messages to {path}")


def handle_chat_command(controller: ConversationController, command: str) -> None:
    name, _, argument = command.partition(" ")
    argument = argument.strip()

    if name == "/new":
        controller.new_chat()
        print_message(controller.messages[0])
    elif name == "/history":
        print_history(controller)
    elif name in ("/load", "/delete") and argument.isdigit():
        session_id = int(argument)
        if name == "/load":
            if controller.load_session(session_id):
                for message in controller.messages:
                    print_message(message)
            else:
                print(f"No chat with id {session_id}.")
        elif not controller.delete_session(session_id):
            print(f"No chat with id {session_id}.")
        else:
            print(f"Deleted chat {session_id}.")
    elif name == "/dismiss":
        controller.dismiss_error()
    elif name == "/export" and argument:
        export_chat(controller, argument)
    else:
        print(CHAT_HELP)


def chat_command(args) -> int:
    """Run an interactive chat shell."""
    try:
        controller = ConversationController(QueryServiceClient(base_url=args.url), get_context())
    except NotAuthenticatedError:
        print("Please log in first: python cli.py login")
        return 1

    print("\n🎓 Unixora Assistant")
    print("=" * 80)
    print("Ask about universities, programs and scholarships. Type /help for commands.")
    print("=" * 80)
    print_message(controller.messages[0])

    while True:
        try:
            query = input("\n💭 > ")

            if query.strip().lower() in ["exit", "quit", "q"]:
                print("\nGoodbye! 👋")
                break

            if query.startswith("/"):
                handle_chat_command(controller, query.strip())
                continue

            before = len(controller.messages)
            if not asyncio.run(controller.submit(query)):
                continue
            for message in controller.messages[before + 1:]:
                print_message(message)
            if controller.error:
                print(f"\n🚨 {controller.error}  (/dismiss to hide)")

        except KeyboardInterrupt:
            print("\nQuery interrupted. Ready for a new question!")
            continue
        except EOFError:
            print("\nGoodbye! 👋")
            break
    return 0


# ─────────────────────────── matcher ───────────────────────────
IMPORTANCE_FIELDS = [
    ("ranking_importance", "University ranking"),
    ("scholarship_importance", "Scholarships"),
    ("research_importance", "Research facilities"),
    ("faculty_importance", "Faculty expertise"),
    ("student_life_importance", "Student life"),
]


def ask(prompt: str, default: str = "") -> str:
    answer = input(f"{prompt} [{default}]: " if default else f"{prompt}: ").strip()
    return answer or default


def prompt_match_form() -> Dict[str, str]:
    form = MatchForm()
    data = {
        "field_of_study": ask("Field of study", form.field_of_study),
        "degree_level": ask("Degree level (UG/PG)", form.degree_level),
        "interests": ask("Interests (comma separated)"),
        "location_preference": ask("Location preference (not_important/specific)", form.location_preference),
    }
    if data["location_preference"] == "specific":
        data["preferred_locations"] = ask("Preferred locations (comma separated)")
    data["fee_preference"] = ask("Fee preference (not_important/max_limit)", form.fee_preference)
    if data["fee_preference"] != "not_important":
        data["max_fees"] = ask("Maximum annual fees (GBP)")
    for field, label in IMPORTANCE_FIELDS:
        data[field] = ask(f"{label} (not_important/somewhat_important/very_important)", getattr(form, field))
    return data


def print_results(results: MatchResults) -> None:
    print(f"\n📊 {results.total_evaluated} universities analyzed • {len(results.matches)} matches found")
    if results.summary:
        print(f"\n📋 Summary\n{results.summary}")

    for match in results.matches:
        expanded = match.rank is not None and match.rank == results.expanded_rank
        score = f"{match.total_score:g}" if match.total_score is not None else "-"
        print(f"\n{'▼' if expanded else '▶'} #{match.rank} {match.name}  (Match Score {score})")
        subtitle = card_subtitle(match)
        if subtitle:
            print(f"   {subtitle}")
        if not expanded:
            continue
        if match.justification:
            print(f"   {match.justification}")
        for section in card_sections(match):
            print(f"\n   {section.title}")
            for item in section.items:
                print(f"     • {item}")


def match_command(args) -> int:
    try:
        controller = MatcherController(MatchServiceClient(base_url=args.url), get_context())
    except NotAuthenticatedError:
        print("Please log in first: python cli.py login")
        return 1

    print("\n🎯 Find your university matches")
    print("=" * 80)
    try:
        form = prompt_match_form()
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return 1

    print("\nFinding matches...")
    asyncio.run(controller.submit(form))

    if controller.error:
        print(f"\n🚨 {controller.error}")
        return 1

    results = controller.results
    print_results(results)
    while results.matches:
        try:
            choice = input("\nRank to expand/collapse (blank to finish): ").strip()
        except (KeyboardInterrupt, EOFError):
            break
        if not choice:
            break
        if choice.isdigit():
            results.toggle(int(choice))
            print_results(results)
    return 0


def main():
    parser = argparse.ArgumentParser(description="CLI client for the Unixora student assistant")
    parser.add_argument("--log-level", default=None, help="Logging level (default: from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("signup", help="Create an account")
    login_parser = subparsers.add_parser("login", help="Log in and store the session")
    login_parser.add_argument("--force", action="store_true", help="Log in again even if a token is stored")
    subparsers.add_parser("logout", help="Forget the stored session")

    chat_parser = subparsers.add_parser("chat", help="Chat with the assistant")
    chat_parser.add_argument("--url", default=None, help="Query Service base URL (default: from settings)")
    match_parser = subparsers.add_parser("match", help="Find matching universities")
    match_parser.add_argument("--url", default=None, help="Match Service base URL (default: from settings)")

    args = parser.parse_args()
    configure_logging(args.log_level or "WARNING")

    commands = {
        "signup": signup_command,
        "login": login_command,
        "logout": logout_command,
        "chat": chat_command,
        "match": match_command,
    }
    sys.exit(commands[args.command](args))


if __name__ == "__main__":
    main()
