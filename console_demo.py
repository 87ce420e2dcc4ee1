"""
Offline console demo: runs a full WhatsApp booking chat in the terminal.

Uses the real booking flow, availability resolver and commit guard over the
in-memory demo salon. No WhatsApp, no database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario conflict
"""

import argparse
from typing import Optional

from salon_booking.config import settings
from salon_booking.conversation.booking_flow import BookingConversation
from salon_booking.conversation.session_store import InMemorySessionStore
from salon_booking.schemas.conversation_schema import BotReply
from salon_booking.tools.seed_data import DEMO_TENANT_ID, DemoStores, build_demo_stores

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_PHONE = "+91 98765 43210"
RIVAL_PHONE = "+91 91234 56789"


class ConsoleSession:
    """Drives the booking flow from the terminal as one or more customers."""

    # Pre-scripted scenarios for --scenario flag: (phone, message) pairs.
    SCENARIOS: dict[str, list[tuple[str, str]]] = {
        "booking": [
            (DEMO_PHONE, "hi"),
            (DEMO_PHONE, "book"),
            (DEMO_PHONE, "haircut"),
            (DEMO_PHONE, "monday"),
            (DEMO_PHONE, "10 am"),
            (DEMO_PHONE, "1"),
            (DEMO_PHONE, "yes"),
        ],
        "conflict": [
            (DEMO_PHONE, "book"),
            (DEMO_PHONE, "Hair Color"),
            (DEMO_PHONE, "monday"),
            (DEMO_PHONE, "11:00"),
            (DEMO_PHONE, "Priya"),
            (RIVAL_PHONE, "book"),
            (RIVAL_PHONE, "2"),
            (RIVAL_PHONE, "monday"),
            (RIVAL_PHONE, "11am"),
            (RIVAL_PHONE, "priya"),
            (RIVAL_PHONE, "confirm"),
            (DEMO_PHONE, "yes"),
        ],
        "cancel": [
            (DEMO_PHONE, "I want to book an appointment"),
            (DEMO_PHONE, "3"),
            (DEMO_PHONE, "cancel"),
        ],
    }

    def __init__(self, stores: Optional[DemoStores] = None) -> None:
        self.stores = stores or build_demo_stores()
        self.flow = BookingConversation(
            self.stores.offerings,
            self.stores.schedule,
            self.stores.bookings,
            InMemorySessionStore(),
        )
        self.trace: list[str] = []

    def bot_say(self, reply: BotReply) -> None:
        print(f"{GREEN}{BOLD}[{settings.business.name}]{RESET} {GREEN}{reply.reply_text}{RESET}")
        if reply.booking_id:
            self.system_log(f"Booking created: {reply.booking_id}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def send(self, phone: str, text: str) -> BotReply:
        reply = self.flow.handle_message(DEMO_TENANT_ID, phone, text)
        self.trace.append(reply.session_state.value)
        self.bot_say(reply)
        self.system_log(f"Step: {reply.session_state.value}")
        return reply

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  WHATSAPP SALON BOOKING - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name} ({settings.business.timezone}){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self, title: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{DIM}  Step trace: {' -> '.join(self.trace)}{RESET}")
        print(f"{DIM}  Bookings: {[b.id for b in self.stores.bookings.all()]}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for phone, text in steps:
            colour = BLUE if phone == DEMO_PHONE else YELLOW
            print(f"\n{colour}[{phone}] {RESET}{text}")
            self.send(phone, text)
        self._summary(f"Scenario '{scenario}' complete.")

    def run(self, phone: str = DEMO_PHONE) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'exit' to leave{RESET}")

        while True:
            try:
                user_input = input(f"\n{BLUE}[{phone}] {RESET}").strip()
            except (EOFError, KeyboardInterrupt):
                print(f"\n{DIM}Session ended.{RESET}")
                break

            if not user_input:
                continue
            if user_input.lower() == "exit":
                break
            self.send(phone, user_input)

        self._summary("Conversation complete.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline WhatsApp booking demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
