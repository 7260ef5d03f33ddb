"""Intent lexicon for the rule classifier.

Each entry maps a device problem to its trigger keywords, the canned
empathetic opening, follow-up questions, an estimated cost range and an
urgency tier. Declaration order matters: the classifier breaks score ties
in favour of the entry declared first.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from repairbot.schemas.memory_schema import UrgencyLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentDefinition:
    """Static description of one problem category."""

    id: str
    keywords: frozenset[str]
    opening_response: str
    follow_up_questions: tuple[str, ...]
    estimated_cost_range: str
    urgency: UrgencyLevel
    solutions: tuple[str, ...] = ()


INTENT_LEXICON: tuple[IntentDefinition, ...] = (
    IntentDefinition(
        id="screen_broken",
        keywords=frozenset({"écran", "cassé", "fissure", "pété", "vitre", "noir"}),
        opening_response=(
            "Je vois que votre écran a un problème ! 📱💔 C'est effectivement l'une des "
            "pannes les plus courantes. Pour vous aider au mieux, j'ai besoin de quelques "
            "précisions :"
        ),
        follow_up_questions=(
            "L'écran tactile fonctionne-t-il encore ?",
            "Voyez-vous des couleurs anormales ou des lignes ?",
            "L'écran s'allume-t-il toujours ?",
        ),
        estimated_cost_range="80-200€",
        urgency=UrgencyLevel.MEDIUM,
        solutions=("Remplacement de l'écran",),
    ),
    IntentDefinition(
        id="battery_issue",
        keywords=frozenset({"batterie", "autonomie", "charge", "décharge", "pourcentage"}),
        opening_response=(
            "Problème de batterie détecté ! 🔋 C'est très fréquent après 2-3 ans "
            "d'utilisation. Laissez-moi vous aider à identifier la cause exacte :"
        ),
        follow_up_questions=(
            "Depuis quand avez-vous remarqué ce problème ?",
            "Le téléphone chauffe-t-il pendant la charge ?",
            "L'autonomie s'est-elle dégradée progressivement ?",
        ),
        estimated_cost_range="50-90€",
        urgency=UrgencyLevel.MEDIUM,
        solutions=("Remplacement de la batterie",),
    ),
    IntentDefinition(
        id="water_damage",
        keywords=frozenset({"eau", "mouillé", "tombé", "liquide", "humidité"}),
        opening_response=(
            "⚠️ Dégât des eaux détecté ! C'est une urgence ! Il faut agir rapidement "
            "pour limiter les dommages :"
        ),
        follow_up_questions=(
            "Le téléphone était-il complètement immergé ?",
            "Combien de temps est-il resté en contact avec le liquide ?",
            "L'avez-vous éteint immédiatement ?",
        ),
        estimated_cost_range="100-300€",
        urgency=UrgencyLevel.HIGH,
        solutions=("Désoxydation de la carte mère", "Séchage professionnel"),
    ),
    IntentDefinition(
        id="no_power",
        keywords=frozenset({"allume", "démarre", "mort"}),
        opening_response=(
            "Votre téléphone ne démarre plus ? 😟 Pas de panique, plusieurs causes "
            "sont possibles. Vérifions ensemble :"
        ),
        follow_up_questions=(
            "Le téléphone réagit-il quand vous le branchez au chargeur ?",
            "Avez-vous essayé un redémarrage forcé ?",
            "Le problème est-il apparu après une chute ou une mise à jour ?",
        ),
        estimated_cost_range="60-150€",
        urgency=UrgencyLevel.HIGH,
        solutions=("Diagnostic de la carte mère", "Remplacement du connecteur de charge"),
    ),
    IntentDefinition(
        id="audio_issue",
        keywords=frozenset({"son", "audio", "haut-parleur", "micro"}),
        opening_response=(
            "Un souci de son ? 🔊 Voyons d'où vient le problème :"
        ),
        follow_up_questions=(
            "Le problème concerne-t-il les appels, la musique ou les deux ?",
            "Le son fonctionne-t-il avec des écouteurs ?",
            "Vos correspondants vous entendent-ils correctement ?",
        ),
        estimated_cost_range="40-90€",
        urgency=UrgencyLevel.LOW,
        solutions=("Remplacement du haut-parleur", "Nettoyage des grilles audio"),
    ),
    IntentDefinition(
        id="slowness",
        keywords=frozenset({"lent", "bug", "planté"}),
        opening_response=(
            "Votre téléphone rame ? 🐢 C'est souvent réparable sans changer de pièce :"
        ),
        follow_up_questions=(
            "Combien d'espace de stockage vous reste-t-il ?",
            "Le ralentissement a-t-il commencé après une mise à jour ?",
            "Le téléphone redémarre-t-il tout seul ?",
        ),
        estimated_cost_range="0-50€",
        urgency=UrgencyLevel.LOW,
        solutions=("Optimisation logicielle", "Réinitialisation avec sauvegarde"),
    ),
)

GENERIC_SUGGESTIONS: tuple[str, ...] = (
    "Mon écran est endommagé",
    "Problème de batterie ou charge",
    "Mon téléphone ne s'allume plus",
    "Autre problème",
)

GENERIC_RESPONSE = (
    "Je suis là pour vous aider ! 😊 Pour vous proposer le meilleur service, "
    "pouvez-vous me décrire précisément le problème que vous rencontrez avec "
    "votre smartphone ?"
)


def get_intent(intent_id: str) -> Optional[IntentDefinition]:
    """Look up a lexicon entry by id."""
    for intent in INTENT_LEXICON:
        if intent.id == intent_id:
            return intent
    return None
