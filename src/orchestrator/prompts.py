"""
src/orchestrator/prompts.py

System prompt for the agent.
"""


from config import SYSTEM_PROMPT_OVERRIDE


DEFAULT_SYSTEM_PROMPT = "Do not run commands on the internet as a whole."

SYSTEM_PROMPT: str = SYSTEM_PROMPT_OVERRIDE or DEFAULT_SYSTEM_PROMPT
