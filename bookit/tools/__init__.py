from bookit.tools.dispatch import ToolCommand, ToolDispatcher, ToolResult, parse_command
from bookit.tools.selection import ProviderSelectionStrategy, ProviderSelector

__all__ = [
    "ToolCommand", "ToolDispatcher", "ToolResult", "parse_command",
    "ProviderSelectionStrategy", "ProviderSelector",
]
