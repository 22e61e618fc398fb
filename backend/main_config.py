import os
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_DIR = os.path.join(BASE_DIR, "db")
AGENT_DIR = os.path.join(DB_DIR, "agent")
AGENT_DB_PATH = os.path.join(AGENT_DIR, "history.db")

PROMPTS_DIR = os.path.join(BASE_DIR, "prompts")
AGENT_SYSTEM_PROMPT_PATH = os.path.join(PROMPTS_DIR, "agent_system_prompt.md")
