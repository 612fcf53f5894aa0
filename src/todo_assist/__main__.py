"""Allow ``python -m todo_assist``."""

from todo_assist.cli import app

app()
