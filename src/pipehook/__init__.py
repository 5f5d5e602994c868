"""pipehook - compile @hook directives into AppSync pipeline resolvers."""

from pipehook.directive import DIRECTIVE_DEFINITION, EntityDefinition, HookDirective
from pipehook.pipeline import HoistedContentRegistry, PipelineCompiler
from pipehook.resources import ResourceGraph
from pipehook.transformer import CompilationArena, HookTransformer

__version__ = "0.1.0"

__all__ = [
    "DIRECTIVE_DEFINITION",
    "CompilationArena",
    "EntityDefinition",
    "HoistedContentRegistry",
    "HookDirective",
    "HookTransformer",
    "PipelineCompiler",
    "ResourceGraph",
]
