"""Dynamic prompt construction from conversation memory and history."""

from typing import Optional

from repairbot.config import settings
from repairbot.prompts.system_prompts import (
    ASSISTANT_PERSONA,
    BEHAVIOUR_RULES,
    RESPONSE_FORMAT,
)
from repairbot.schemas.conversation_schema import Message, SenderType
from repairbot.schemas.memory_schema import ConversationMemory, RepairerRef


def _or_none(items: list[str], empty: str = "Aucun") -> str:
    return ", ".join(items) if items else empty


def build_profile_section(memory: ConversationMemory) -> str:
    """Describe the customer profile and emotional state."""
    profile = memory.user_profile
    journey = memory.emotional_journey
    last_satisfaction = (
        f"{profile.satisfaction_history[-1]:.0f}%" if profile.satisfaction_history else "inconnue"
    )
    return "\n".join([
        "🧠 **PROFIL UTILISATEUR :**",
        f"- Style de communication : {profile.communication_style.value}",
        f"- Niveau d'urgence : {profile.urgency_level.value}",
        f"- Problèmes précédents : {_or_none(profile.previous_issues, 'Aucun historique')}",
        f"- Dernière satisfaction : {last_satisfaction}",
        "",
        "📊 **CONTEXTE ÉMOTIONNEL :**",
        f"- Humeur actuelle : {journey.current_mood}",
        f"- Niveau de frustration : {journey.frustration_level}/10",
        f"- Confiance en la solution : {journey.confidence_level:.0f}%",
    ])


def build_diagnosis_section(memory: ConversationMemory) -> str:
    """Describe the diagnosis progress so far."""
    context = memory.conversation_context
    return "\n".join([
        "🔬 **ÉTAT DU DIAGNOSTIC :**",
        f"- Étape actuelle : {context.diagnosis_stage}",
        f"- Problème en cours : {context.current_issue or 'non identifié'}",
        f"- Symptômes identifiés : {_or_none(context.collected_symptoms)}",
        f"- Solutions suggérées : {_or_none(context.suggested_solutions, 'Aucune')}",
    ])


def build_history_section(history: list[Message], window: Optional[int] = None) -> str:
    """Number the last ``window`` messages, most recent last."""
    window = settings.memory.history_window if window is None else window
    recent = history[-window:] if window > 0 else []
    if not recent:
        return "📝 **HISTORIQUE :** aucun message précédent"
    assistant = settings.assistant.name
    lines = ["📝 **HISTORIQUE CONVERSATION :**"]
    for index, message in enumerate(recent, start=1):
        speaker = "Client" if message.sender_type == SenderType.USER else assistant
        lines.append(f"{index}. {speaker}: {message.content}")
    return "\n".join(lines)


def build_repairers_section(
    repairers: list[RepairerRef], limit: Optional[int] = None
) -> str:
    """List up to ``limit`` nearby repairers; empty string when none are known."""
    limit = settings.memory.max_repairer_hints if limit is None else limit
    shown = repairers[:limit]
    if not shown:
        return ""
    lines = ["🏪 **RÉPARATEURS PROCHES DISPONIBLES :**"]
    for repairer in shown:
        rating = f" ({repairer.rating}/5)" if repairer.rating is not None else ""
        distance = (
            f" à {repairer.distance_km:.1f} km" if repairer.distance_km is not None else ""
        )
        lines.append(f"- {repairer.name}{rating} - {repairer.address}{distance}")
    return "\n".join(lines)


def build_diagnostic_prompt(
    text: str,
    history: list[Message],
    memory: ConversationMemory,
) -> str:
    """Assemble the full system prompt for one provider call."""
    sections = [
        ASSISTANT_PERSONA,
        build_profile_section(memory),
        build_diagnosis_section(memory),
        build_history_section(history),
        f'💬 **MESSAGE UTILISATEUR ACTUEL :** "{text}"',
    ]
    repairers = build_repairers_section(memory.conversation_context.nearby_repairers)
    if repairers:
        sections.append(repairers)
    sections.append(BEHAVIOUR_RULES)
    sections.append(RESPONSE_FORMAT)
    return "\n\n".join(sections)


def greeting_for_hour(hour: int) -> str:
    """Bonsoir from 18h, Bon après-midi from 12h, Bonjour otherwise."""
    if hour >= 18:
        return "Bonsoir"
    if hour >= 12:
        return "Bon après-midi"
    return "Bonjour"


def build_welcome_message(hour: int, has_location: bool) -> str:
    """Opening message adapted to the time of day and shared location."""
    assistant = settings.assistant
    location_context = (
        " Je vois que vous êtes connecté avec votre localisation, parfait pour "
        "vous trouver un réparateur proche !"
        if has_location
        else ""
    )
    return (
        f"{greeting_for_hour(hour)} ! 👋 Je suis {assistant.name}, votre assistant de "
        f"réparation {assistant.brand} !\n\n"
        "Je suis là pour vous aider à diagnostiquer précisément votre problème de "
        f"smartphone.{location_context}\n\n"
        "🔬 **Ce que je peux faire pour vous :**\n"
        "• Diagnostic intelligent étape par étape\n"
        "• Estimation des coûts de réparation\n"
        "• Recommandation des meilleurs réparateurs près de chez vous\n"
        "• Suivi personnalisé de votre demande\n\n"
        "Comment puis-je vous aider aujourd'hui ? 😊"
    )
