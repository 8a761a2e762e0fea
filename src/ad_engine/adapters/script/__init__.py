"""Script generation adapters."""

from ad_engine.adapters.script.base import Script, ScriptProvider
from ad_engine.adapters.script.llm import LLMScriptProvider
from ad_engine.adapters.script.stub import StubScriptProvider

__all__ = ["LLMScriptProvider", "Script", "ScriptProvider", "StubScriptProvider"]
