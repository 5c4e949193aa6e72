"""
Main Compiler Driver

Orchestrates the compilation pipeline: decode the input document, generate
the instruction stream, check its labels, serialize it.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional

from stackc.ast_nodes import MalformedTree
from stackc.codegen import CodeGenerator
from stackc.decoder import decode_document
from stackc.instructions import to_json
from stackc.verifier import check_labels

logger = logging.getLogger(__name__)


def compile_tree(document: Any) -> List[Any]:
    """Compile an already-parsed document into JSON-ready instructions.

    Raises ``MalformedTree`` if the document is not a well-formed tree.
    """
    tree = decode_document(document)
    return to_json(CodeGenerator().generate(tree))


def _env_indent() -> Optional[int]:
    raw = os.environ.get("STACKC_JSON_INDENT")
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring non-integer STACKC_JSON_INDENT=%r", raw)
        return None


@dataclass
class CompilationResult:
    """Result of compilation"""
    success: bool
    program: Optional[List[Any]] = None
    output_file: Optional[str] = None
    errors: List[str] = None
    warnings: List[str] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []
        if self.warnings is None:
            self.warnings = []


class Compiler:
    """Main compiler class orchestrating all compilation stages"""

    def __init__(
        self,
        *,
        reset_labels: Optional[bool] = None,
        verify: bool = True,
        indent: Optional[int] = None,
    ):
        if reset_labels is None:
            reset_labels = os.environ.get("STACKC_KEEP_LABELS", "") not in ("1", "true", "yes")
        self.reset_labels = reset_labels
        self.verify = verify
        self.indent = indent if indent is not None else _env_indent()
        self._codegen = CodeGenerator(reset_labels=reset_labels)

    def reset(self, labels: bool = True) -> None:
        self._codegen.reset(labels=labels)

    def compile_file(self, source_file: str, output_file: Optional[str] = None) -> CompilationResult:
        """Compile a JSON document stored in a file.

        When ``output_file`` is given the serialized program is written there.
        """
        try:
            with open(source_file, 'r', encoding="utf-8") as f:
                text = f.read()
        except IOError as e:
            return CompilationResult(
                success=False,
                errors=[f"Failed to read source file: {e}"]
            )

        result = self.compile_json(text)
        if not result.success or not output_file:
            return result

        try:
            with open(output_file, 'w', encoding="utf-8") as f:
                f.write(self.dumps(result.program))
                f.write("\n")
        except IOError as e:
            return CompilationResult(success=False, errors=[f"Failed to write output file: {e}"])
        result.output_file = output_file
        return result

    def compile_json(self, text: str) -> CompilationResult:
        """Compile a JSON document given as text"""
        try:
            document = json.loads(text)
        except ValueError as e:
            return CompilationResult(success=False, errors=[f"Invalid JSON: {e}"])
        except RecursionError:
            return CompilationResult(success=False, errors=["Invalid JSON: document nested too deeply"])
        return self.compile_document(document)

    def compile_document(self, document: Any) -> CompilationResult:
        """Compile an already-parsed document"""
        warnings: List[str] = []

        # Phase 1: Decoding
        try:
            tree = decode_document(document)
        except MalformedTree as e:
            return CompilationResult(success=False, errors=[f"Decoding failed: {e}"])
        except RecursionError:
            return CompilationResult(success=False, errors=["Decoding failed: tree nested too deeply"])

        # Phase 2: Code Generation
        try:
            program = self._codegen.generate(tree)
        except MalformedTree as e:
            return CompilationResult(success=False, errors=[f"Code generation failed: {e}"])
        except RecursionError:
            return CompilationResult(success=False, errors=["Code generation failed: tree nested too deeply"])

        # Phase 3: Label checks
        if self.verify:
            for problem in check_labels(program):
                logger.warning("label check: %s", problem)
                warnings.append(f"Label check: {problem}")

        return CompilationResult(success=True, program=to_json(program), warnings=warnings)

    def dumps(self, program: List[Any]) -> str:
        return json.dumps(program, indent=self.indent)
