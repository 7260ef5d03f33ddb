from repairbot.engine import ActionResult, ChatbotEngine, build_engine

__all__ = ["ChatbotEngine", "ActionResult", "build_engine"]
