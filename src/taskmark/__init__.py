"""Plain-text task lists: parse, toggle and schedule tasks written in markup."""

from taskmark.api import OpenRouterApi
from taskmark.core.markup.classifier import classify, serialize
from taskmark.core.markup.mutator import toggle_task
from taskmark.core.markup.parser import parse
from taskmark.exporter import MarkdownExporter
from taskmark.models.node import Node, NodeKind, Priority
from taskmark.protocols import GeneratorProtocol

__all__ = [
    "GeneratorProtocol",
    "MarkdownExporter",
    "Node",
    "NodeKind",
    "OpenRouterApi",
    "Priority",
    "classify",
    "parse",
    "serialize",
    "toggle_task",
]
