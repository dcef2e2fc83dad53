"""Tool executors (shell, postgres, web_search) and the tool policy."""
