"""Diagnostic report projection. Reads memory, never writes it."""

from repairbot.config import settings
from repairbot.schemas.memory_schema import ConversationMemory
from repairbot.schemas.response_schema import DiagnosticReport

RECOMMENDATIONS: tuple[str, ...] = (
    "Consultation d'un réparateur agréé recommandée",
    "Obtenir un devis détaillé avant réparation",
    "Sauvegarder vos données importantes",
)


def generate_report(memory: ConversationMemory) -> DiagnosticReport:
    symptoms = list(memory.conversation_context.collected_symptoms)
    return DiagnosticReport(
        summary=f"Diagnostic basé sur {len(symptoms)} symptôme(s) identifié(s)",
        symptoms=symptoms,
        recommendations=list(RECOMMENDATIONS),
        estimated_timeline=settings.assistant.estimated_timeline,
        confidence_level=memory.emotional_journey.confidence_level,
    )
