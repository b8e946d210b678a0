"""
OpenSDR -- LinkedIn prospecting from the command line
=====================================================
Usage:
  1. pip install -e .
  2. playwright install chromium
  3. Copy .env.example to .env and add your GEMINI_API_KEY
  4. python main.py login
  5. python main.py connections "Acme" --degree second
     python main.py profile "Jane Doe" --company Acme
     python main.py mutuals "Jane Doe"
     python main.py draft https://www.linkedin.com/in/jane-doe "Hi Jane!"
"""
import argparse
import asyncio
import json
import logging
import sys

from opensdr.linkedin import Degree, LinkedInProspector
from opensdr.linkedin.errors import LinkedInError
from opensdr.logging_config import setup_logging

logger = logging.getLogger("opensdr")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opensdr", description="LinkedIn prospecting tools")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Sign in to LinkedIn and save session cookies")

    connections = sub.add_parser("connections", help="Find connections at a company")
    connections.add_argument("company")
    connections.add_argument(
        "--degree", choices=[d.value for d in Degree], default=Degree.FIRST.value
    )

    for name, help_text in (
        ("profile", "Find a person's profile"),
        ("mutuals", "Find mutual connections with a person"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("person")
        cmd.add_argument("--company", default=None)

    draft = sub.add_parser("draft", help="Open a profile with a message drafted")
    draft.add_argument("profile_url")
    draft.add_argument("message")
    return parser


def _dump(result) -> str:
    if isinstance(result, list):
        return json.dumps([r.model_dump(by_alias=True) for r in result], indent=2)
    if hasattr(result, "model_dump"):
        return json.dumps(result.model_dump(by_alias=True), indent=2)
    return json.dumps(result)


async def run(args: argparse.Namespace) -> int:
    async with LinkedInProspector() as prospector:
        if args.command == "login":
            ok = await prospector.login()
            if ok:
                print("Successfully logged in")
            return 0 if ok else 1

        if args.command == "connections":
            result = await prospector.find_connections_at_company(args.company, args.degree)
        elif args.command == "profile":
            result = await prospector.find_profile(args.person, args.company)
        elif args.command == "mutuals":
            result = await prospector.find_mutual_connections(args.person, args.company)
        else:
            result = await prospector.draft_message(args.profile_url, args.message)
            if result:
                await asyncio.to_thread(
                    input, "  >>> Message drafted. Press ENTER to close the browser... "
                )

        print(_dump(result))
        return 0


def main():
    """Entry point for the OpenSDR command line."""
    setup_logging()
    args = build_parser().parse_args()
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\n\n[!] Interrupted by user. Exiting.")
        sys.exit(0)
    except (LinkedInError, EnvironmentError) as e:
        logger.error(str(e))
        print(f"\n[!] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
