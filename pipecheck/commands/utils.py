"""
Shared console for pipecheck commands.
"""

from rich.console import Console

console = Console()
