"""
Salon booking bot entry point.

Runs the booking conversation offline against the demo salon. A WhatsApp
transport calls ``BookingConversation.handle_message`` directly and does
not go through this script.

Usage:
    Console mode:  python main.py console
    Scenario mode: python main.py scenario conflict
"""

import argparse
import logging

from salon_booking.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode() -> None:
    """Start the interactive console demo."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


def _run_scenario_mode(name: str) -> None:
    """Auto-play one scripted scenario."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run_scenario(name)


def main() -> None:
    parser = argparse.ArgumentParser(description=f"{settings.business.name} booking bot")
    sub = parser.add_subparsers(dest="mode")
    sub.add_parser("console", help="Chat with the bot in the terminal")
    scenario = sub.add_parser("scenario", help="Replay a scripted conversation")
    scenario.add_argument("name", help="Scenario name, e.g. booking, conflict, cancel")
    args = parser.parse_args()

    logger.info("Starting in %s mode", args.mode or "console")
    if args.mode == "scenario":
        _run_scenario_mode(args.name)
    else:
        _run_console_mode()


if __name__ == "__main__":
    main()
