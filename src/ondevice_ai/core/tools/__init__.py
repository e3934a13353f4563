from .base import FunctionTool, LocalSearchTool, Tool
from .registry import ToolRegistry

__all__ = ["FunctionTool", "LocalSearchTool", "Tool", "ToolRegistry"]
