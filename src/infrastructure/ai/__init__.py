# AI Package
from .openai_adapter import OpenAIAdapter
from .prompt_builder import PromptBuilder

__all__ = ["OpenAIAdapter", "PromptBuilder"]
