"""
Offline console demo. Runs a full diagnostic conversation through the engine.

Every turn goes through the real action dispatcher, session manager, rule
classifier, memory fold and composer. Without an OPENAI_API_KEY the
orchestrator answers from the rule classifier alone, so no network calls
are made. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario battery
    python console_demo.py --scenario screen --location 48.8566,2.3522
"""

import argparse
import asyncio
import uuid
from typing import Any, Optional

from repairbot.config import settings
from repairbot.engine import ActionResult, ChatbotEngine, build_engine

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Drives one conversation in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "screen": [
            "Bonjour, mon écran est cassé après une chute",
            "L'écran tactile ne répond plus en bas et il y a une fissure",
            "C'est un iPhone 12, je voudrais un devis",
        ],
        "battery": [
            "Ma batterie se décharge très vite",
            "Il chauffe aussi quand je le charge",
        ],
        "water": [
            "Urgent ! Mon téléphone est tombé dans l'eau",
            "Il ne s'allume plus depuis ce matin, c'est galère",
        ],
        "nonsense": [
            "abcxyz nonsense",
        ],
    }

    MAX_INPUT_LENGTH = 1000

    def __init__(
        self,
        engine: Optional[ChatbotEngine] = None,
        location: Optional[tuple[float, float]] = None,
    ) -> None:
        self.engine = engine or build_engine()
        self.location = location
        self.conversation_id: Optional[str] = None

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.assistant.name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _show_options(self, body: dict[str, Any]) -> None:
        for suggestion in body.get("suggestions", []):
            print(f"{YELLOW}   - {suggestion}{RESET}")
        actions = [a["label"] for a in body.get("actions", [])]
        if actions:
            self.system_log(f"Actions: {', '.join(actions)}")

    def _show_error(self, result: ActionResult) -> None:
        print(f"{RED}[{result.status_code}] {result.body.get('error')}{RESET}")
        self.bot_say(result.body.get("fallback_response", ""))

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def open(self) -> bool:
        payload: dict[str, Any] = {
            "action": "start_conversation",
            "session_id": f"console-{uuid.uuid4().hex[:8]}",
        }
        if self.location:
            payload["user_location"] = list(self.location)
        result = await self.engine.handle(payload)
        if not result.ok:
            self._show_error(result)
            return False
        self.conversation_id = result.body["conversation_id"]
        self.bot_say(result.body["message"])
        self._show_options(result.body)
        self.system_log(f"Conversation: {self.conversation_id}")
        return True

    async def send(self, text: str) -> None:
        result = await self.engine.handle({
            "action": "send_message",
            "conversation_id": self.conversation_id,
            "content": text,
        })
        if not result.ok:
            self._show_error(result)
            return
        body = result.body
        self.bot_say(body["response"])
        self._show_options(body)
        diagnostic = body.get("diagnostic_data", {})
        self.system_log(
            f"Model: {body['metadata'].get('ai_model')} | "
            f"confidence {body['confidence']:.2f} | "
            f"stage {diagnostic.get('diagnosis_stage')} | "
            f"cost {diagnostic.get('estimated_cost') or '-'}"
        )
        emotional = body.get("emotional_context", {})
        self.system_log(
            f"Mood: {emotional.get('current_mood')} | "
            f"frustration {emotional.get('frustration_level')}/10 | "
            f"confidence {emotional.get('confidence_level')}%"
        )

    async def close(self, satisfaction_score: float = 90) -> None:
        report = await self.engine.handle({
            "action": "generate_diagnostic_report",
            "conversation_id": self.conversation_id,
        })
        if report.ok:
            data = report.body["report"]
            print(f"\n{BOLD}Rapport de diagnostic{RESET}")
            self.system_log(data["summary"])
            for symptom in data["symptoms"]:
                self.system_log(f"Symptôme: {symptom}")
            self.system_log(f"Délai estimé: {data['estimated_timeline']}")

        result = await self.engine.handle({
            "action": "end_conversation",
            "conversation_id": self.conversation_id,
            "satisfaction_score": satisfaction_score,
        })
        if result.ok:
            self.bot_say(result.body["message"])
        else:
            self._show_error(result)

    # ------------------------------------------------------------------ #
    # Modes
    # ------------------------------------------------------------------ #

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.assistant.brand.upper()} - Scenario: {scenario}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        if not await self.open():
            return
        for step in steps:
            print(f"\n{BLUE}[Client] {RESET}{step}")
            await self.send(step)
        await self.close()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.assistant.brand.upper()} - Console Demo{RESET}")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        if not await self.open():
            return
        while True:
            user_input = input(f"\n{BLUE}[Client] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.bot_say("Votre message est un peu long, pouvez-vous le résumer ?")
                continue
            await self.send(user_input)
        await self.close()


def _parse_location(raw: Optional[str]) -> Optional[tuple[float, float]]:
    if not raw:
        return None
    lat, lng = (float(part) for part in raw.split(","))
    return lat, lng


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--location",
        default=None,
        help="Share a location as 'lat,lng' when the conversation starts",
    )
    args = parser.parse_args()

    session = ConsoleSession(location=_parse_location(args.location))
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
