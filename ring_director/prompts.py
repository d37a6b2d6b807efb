"""Handlebars directive templates for storyline beats, matches and promos.

Values are inserted with triple-stash ({{{name}}}) so names such as
Jerry "The King" Lawler are not HTML-escaped.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pybars

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def format_intensity(intensity: float) -> str:
    """7.3 -> "7.3", 5.0 -> "5"."""
    return f"{round(intensity, 1):g}"


# ── Feud beats ────────────────────────────────────────────

FEUD_DIRECTIVES: dict[str, str] = {
    "trash-talk": (
        "You're in the middle of a heated feud with {{{opponent}}}. Trash talk them. "
        "Be creative and in-character. Reference your history. Intensity: {{intensity}}/10."
    ),
    "challenge": (
        "Challenge {{{opponent}}} to a match. Make it dramatic. The crowd should go wild."
    ),
    "alliance-tease": (
        "Hint that maybe you and {{{opponent}}} could team up against a common enemy. "
        "But don't commit. Keep them guessing."
    ),
    "backstory": (
        "Reference a past encounter with {{{opponent}}}. A famous match, a backstage "
        "confrontation, something from your shared history."
    ),
    "escalation": (
        "The feud with {{{opponent}}} is getting personal. Take it up a notch: threaten "
        "their title, mock their catchphrase, find what gets under their skin. "
        "Intensity: {{intensity}}/10."
    ),
    "mind-games": (
        "Play mind games with {{{opponent}}}. Get inside their head. Be subtle and "
        "psychological; make them doubt themselves."
    ),
}

# ── Surprise entrances ────────────────────────────────────

SURPRISE_DIRECTIVES: dict[str, str] = {
    "entrance": (
        "{{{entrance}}} You're making your DRAMATIC ENTRANCE. Nobody expected you. "
        "React to what's been happening and make your presence known."
    ),
    "interruption": (
        "You're interrupting whatever is going on right now. You have something to say "
        "and you don't care who was talking. Cut in dramatically."
    ),
    "save": (
        "Someone is getting ganged up on or beaten down verbally. You're here to even "
        "the odds. Make a dramatic save."
    ),
    "betrayal": (
        "You were thought to be allied with someone here, but you're turning on them "
        "RIGHT NOW. Shocking heel turn."
    ),
    "return": "You've been gone for a while and you're BACK. {{{entrance}}} Make it count.",
    "run-in": (
        "You're attacking from behind! Nobody saw you coming. Pick a target and lay them out."
    ),
}

DEFAULT_ENTRANCE = "*music hits*"

# ── Promos ────────────────────────────────────────────────

PROMO_DIRECTIVES: tuple[str, ...] = (
    "Cut a promo about why you're the greatest of all time. Address the crowd directly. Build hype.",
    "Tell a story from your career. Make it dramatic and entertaining.",
    "React to what's been happening in the arena tonight. Give your take on the other characters.",
    "Hype up an upcoming confrontation. Build suspense.",
    "Address the fans directly. What does being a superstar mean to you?",
)

RIVAL_PROMO_DIRECTIVES: tuple[str, ...] = (
    "Cut a promo calling out {{{opponent}}}. Challenge them. Get the crowd going.",
    "Respond to something {{{opponent}}} said recently. Don't let them get the last word.",
)

# ── Match rounds ──────────────────────────────────────────

PHASE_DESCRIPTIONS: dict[str, str] = {
    "early": "The match is just getting started. The crowd is buzzing.",
    "mid": "The match is in full swing. The pace is picking up.",
    "late": "This match could end at any moment! The crowd is on their feet!",
    "finish": "THIS IS IT! The decisive moment!",
}

ROUND_NARRATIVES: dict[str, str] = {
    "lock-up": "{{{actor}}} and {{{target}}} lock up in the center of the ring.",
    "feeling-out": "Both competitors are testing each other, looking for an opening.",
    "momentum-shift": "{{{actor}}} has seized the momentum! {{{target}}} is reeling!",
    "signature-move": "{{{actor}}} hits a signature move on {{{target}}}!",
    "near-fall": "{{{actor}}} goes for the cover! 1... 2... {{{target}}} kicks out!",
    "counter": "{{{target}}} counters {{{actor}}}'s attack with a devastating reversal!",
    "finisher-attempt": "{{{actor}}} is setting up for the {{{finisher}}}!",
    "finisher-counter": "{{{target}}} COUNTERS the {{{finisher}}}! What a reversal!",
    "near-fall-kickout": (
        "{{{actor}}} hits the {{{finisher}}}! Cover! 1... 2... NO! "
        "{{{target}}} kicks out at the last second!"
    ),
    "comeback": "{{{actor}}} is mounting a comeback! The crowd is going WILD!",
    "outside-brawl": "The action has spilled to the outside! Brawling near the announce table!",
    "weapon-shot": "{{{actor}}} grabs a steel chair! CRACK! Right across {{{target}}}'s back!",
    "ref-bump": "The referee is down! Accidental collision! No one's counting!",
    "double-down": "Both competitors are down! The referee starts the count!",
    "clean-finish": "{{{actor}}} hits the {{{finisher}}}! Cover! 1... 2... 3! It's over!",
    "dirty-finish": (
        "Low blow by {{{actor}}} while the ref wasn't looking! Roll-up! 1-2-3! Stolen victory!"
    ),
    "surprise-roll-up": "Small package by {{{actor}}}! 1-2-3! OUT OF NOWHERE!",
    "submission-tap": (
        "{{{actor}}} locks in the hold! {{{target}}} is fading... TAP! {{{target}}} taps out!"
    ),
    "interference": "Wait, someone is running down the ramp! INTERFERENCE!",
}

DEFAULT_ROUND_NARRATIVE = "{{{actor}}} and {{{target}}} exchange blows in a back-and-forth battle!"

COMMENTARY_PROMPT = (
    "{{{phase}}}\n\n{{{narrative}}}\n\n"
    "Provide 1-2 lines of exciting commentary for this moment. Be dramatic!"
)

CHARACTER_ROUND_PROMPT = "You just {{outcome}}: {{{narrative}}}\n\nReact in character in 1-2 sentences."

# ── Responders ────────────────────────────────────────────

RESPONDER_PROMPT = """Here's the recent conversation in the arena chat:

{{#each recent}}{{{author}}}: {{{content}}}
{{/each}}
{{#if context}}STORYLINE DIRECTION: {{{context}}}

{{/if}}{{#if is_surprise}}THIS IS YOUR DRAMATIC ENTRANCE. Make it memorable.

{{/if}}Respond in character as {{{name}}}. Keep it to 1-3 sentences max (this is chat, not a speech). Be entertaining and stay in character."""

# ── Titles ────────────────────────────────────────────────

CHAMPION_CONTEXT = (
    "You are the current {{{title}}} champion with {{defenses}} successful "
    "defense{{#unless one}}s{{/unless}}. Defend your title with pride."
)

CHALLENGER_CONTEXT = (
    "Your opponent holds the {{{title}}}. You WANT that title. "
    "Make it clear you're coming for their gold."
)

# ── Announcers ────────────────────────────────────────────

ANNOUNCER_EVENT_PROMPTS: dict[str, str] = {
    "surprise-entrance": (
        "A wrestler just made a SURPRISE ENTRANCE! {{{context}}}. "
        "React as a commentator would and call the action!"
    ),
    "surprise-interruption": (
        "Someone just INTERRUPTED the conversation! {{{context}}}. Call it like you see it!"
    ),
    "surprise-betrayal": (
        "SHOCKING BETRAYAL! {{{context}}}. This is a huge moment, react accordingly!"
    ),
    "surprise-save": "Someone just made the SAVE! {{{context}}}. The crowd is going crazy!",
    "surprise-run-in": "RUN-IN! Attack from behind! {{{context}}}. Call the chaos!",
    "title-change": "WE HAVE A NEW CHAMPION! {{{context}}}. This is a historic moment!",
    "feud-escalation": "This feud just got MORE PERSONAL! {{{context}}}. Things are heating up!",
    "scheduled-promo": "A wrestler is cutting a promo. {{{context}}}. React to what they're saying.",
}

ANNOUNCER_PROMPT = (
    "{{{event}}}\n\nReact in ONE short commentary line (1-2 sentences max). "
    "You're at the announce table calling the action."
)
