"""
stackc - AST to stack machine compiler

Translates a pre-built abstract syntax tree of a small imperative language
into a flat instruction stream for a stack-based virtual machine.
"""

__version__ = "0.1.0"
__author__ = "stackc Contributors"
__license__ = "MIT"

from .ast_nodes import MalformedTree, MissingDiscriminant, MissingField, Program, UnknownKind
from .decoder import decode_document, decode_node
from .instructions import Instruction
from .labels import LabelAllocator
from .codegen import CodeGenerator
from .compiler import CompilationResult, Compiler, compile_tree

__all__ = [
    'MalformedTree',
    'MissingDiscriminant',
    'MissingField',
    'UnknownKind',
    'Program',
    'decode_document',
    'decode_node',
    'Instruction',
    'LabelAllocator',
    'CodeGenerator',
    'CompilationResult',
    'Compiler',
    'compile_tree',
]
