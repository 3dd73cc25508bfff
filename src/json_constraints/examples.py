"""
examples.py

PURPOSE: Ready-made schemas for game responses, used by the CLI and the tests.
DEPENDENCIES: models

ARCHITECTURE NOTES:
Each builder returns a fresh field tree. Builders without arguments are
registered in EXAMPLE_SCHEMAS so the CLI can list and export them; the
parameterised builders show how a caller assembles a schema from the
current scene (available skills, outcomes, items).
"""

from collections.abc import Callable

from json_constraints.models.fields import (
    ArrayField,
    BooleanField,
    ChoiceField,
    CompositeField,
    ConstantField,
    FloatField,
    IntegerField,
    OptionalField,
    StringField,
    TemplateStringField,
    VariantField,
)


def scene_event_schema() -> CompositeField:
    """A scene event whose content depends on its type."""
    return CompositeField(
        "SceneEvent",
        ChoiceField("type", "combat", "dialogue", "exploration"),
        VariantField(
            "content",
            CompositeField(
                "combat",
                IntegerField("enemyLevel", 1, 999),
                ChoiceField("enemyType", "goblin", "dragon", "bandit"),
            ),
            CompositeField(
                "dialogue",
                StringField("speaker", 3, 20),
                TemplateStringField("text", "says <generated>", 10, 100),
            ),
            CompositeField(
                "exploration",
                StringField("location", 5, 30),
                StringField("description", 20, 200),
                BooleanField("hasLoot"),
            ),
        ),
    )


def character_schema() -> CompositeField:
    """A player character sheet."""
    return CompositeField(
        "character",
        StringField("name", 3, 20),
        IntegerField("age", 0, 120),
        ChoiceField("class", "warrior", "mage", "rogue", "archer"),
        CompositeField(
            "stats",
            IntegerField("strength", 1, 20),
            IntegerField("dexterity", 1, 20),
            IntegerField("intelligence", 1, 20),
            IntegerField("constitution", 1, 20),
        ),
        ArrayField("skills", StringField("skill", 3, 15), 0, 5),
        OptionalField("backstory", StringField("backstory", 50, 500)),
        IntegerField("health", 0, 999),
    )


def quest_schema() -> CompositeField:
    """A quest with objectives and one of several quest kinds."""
    return CompositeField(
        "Quest",
        StringField("title", 5, 50),
        StringField("description", 20, 300),
        ChoiceField("difficulty", "easy", "medium", "hard", "legendary"),
        ArrayField(
            "objectives",
            CompositeField(
                "objective",
                StringField("description", 10, 100),
                BooleanField("completed"),
                OptionalField("reward", IntegerField("gold", 0, 9999)),
            ),
            1,
            5,
        ),
        VariantField(
            "questType",
            CompositeField(
                "killQuest",
                StringField("targetType", 3, 20),
                IntegerField("targetCount", 1, 99),
            ),
            CompositeField(
                "fetchQuest",
                StringField("itemName", 3, 30),
                IntegerField("quantity", 1, 99),
                StringField("location", 5, 40),
            ),
            CompositeField(
                "escortQuest",
                StringField("npcName", 3, 25),
                StringField("destination", 5, 40),
                BooleanField("npcSurvived"),
            ),
        ),
    )


def server_config_schema() -> CompositeField:
    """Fixed and ranged numbers side by side."""
    return CompositeField(
        "ServerConfig",
        ConstantField("exactPort", 8080),
        ConstantField("exactRatio", 1.0),
        ConstantField("protocol", "http"),
        FloatField("loadFactor", 0.0, 1.0),
        IntegerField("timeoutSeconds", 1, 300),
        ChoiceField("retries", 0, 1, 3, 5),
    )


def observation_schema() -> CompositeField:
    """Free narration of what the avatar observes."""
    return CompositeField(
        "ObservationResponse",
        StringField(
            "narration_text",
            50,
            600,
            hint="A short description of what the avatar observes in the environment",
        ),
    )


def observation_schema_with_intro(keywords: list[str]) -> CompositeField:
    """
    Observation narration forced to open on the first keyword.

    Falls back to observation_schema() when there are no keywords.
    """
    if not keywords:
        return observation_schema()

    return CompositeField(
        "ObservationResponse",
        TemplateStringField(
            "narration_text",
            f"You notice {keywords[0]} <generated>",
            50,
            550,
        ),
    )


def thinking_schema(action_skills: list[str], outcomes: list[str]) -> CompositeField:
    """Reasoning text plus two to five candidate actions."""
    return CompositeField(
        "ThinkingResponse",
        StringField(
            "reasoning_text",
            50,
            800,
            hint="A short reasoning process the avatar used to decide on actions",
        ),
        ArrayField(
            "actions",
            CompositeField(
                "Action",
                ChoiceField("action_skill", action_skills),
                ChoiceField("outcome", outcomes),
                TemplateStringField(
                    "action_description",
                    "try to <generated>",
                    10,
                    400,
                    hint="Describe in few words the action the avatar will take",
                ),
            ),
            2,
            5,
        ),
    )


def outcome_narration_schema() -> CompositeField:
    """Narration of an action's result."""
    return CompositeField(
        "OutcomeNarration",
        StringField(
            "narration",
            50,
            800,
            hint="A short narration text describing the outcome of the action",
        ),
    )


def action_outcome_schema(
    state_categories: dict[str, list[str]],
    accessible_sublocations: list[str],
    available_items: list[str],
) -> CompositeField:
    """
    Outcome of an action as decided by the director.

    Args:
        state_categories: Category id -> states it can change to.
        accessible_sublocations: Sublocations the avatar may move to.
        available_items: Items the action may yield.
    """
    state_changes = [
        CompositeField(
            "no_change",
            ConstantField("category", "none"),
            ConstantField("new_state", "none"),
        )
    ]
    for category_id, states in state_categories.items():
        if states:
            state_changes.append(
                CompositeField(
                    f"change_{category_id}",
                    ConstantField("category", category_id),
                    ChoiceField("new_state", states),
                )
            )

    items = list(dict.fromkeys(available_items)) or ["none"]

    return CompositeField(
        "ActionOutcome",
        BooleanField("success"),
        StringField("narrative", 20, 300),
        VariantField("state_changes", state_changes),
        ChoiceField("new_sublocation", list(dict.fromkeys([*accessible_sublocations, "none"]))),
        ArrayField("items_gained", ChoiceField("item", items), 0, 3),
        BooleanField("ends_interaction"),
    )


EXAMPLE_SCHEMAS: dict[str, Callable[[], CompositeField]] = {
    "SceneEvent": scene_event_schema,
    "Character": character_schema,
    "Quest": quest_schema,
    "ServerConfig": server_config_schema,
    "Observation": observation_schema,
    "OutcomeNarration": outcome_narration_schema,
}
