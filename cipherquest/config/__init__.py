from .settings import Settings, QuestRules, QUEST_RULES, load_settings

__all__ = ["Settings", "QuestRules", "QUEST_RULES", "load_settings"]
