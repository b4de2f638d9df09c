# src/dspace_core/parameters/dependency_parser.py

"""
Provides the ASTDependencyExtractor service for whole-identifier analysis of
bound expressions.

Bound expressions (e.g. `inclMax="0.5 * Population.Size"`) are usually valid
Python arithmetic. The extractor parses them with the `ast` module and returns
every simple name and every dotted attribute chain it references. Expressions
that are not valid Python (descriptor formats allow a few foreign operators)
are tokenized with a conservative identifier regex instead, so the caller
always gets a token set back.
"""

import ast
import logging
import re
from typing import Set

logger = logging.getLogger(__name__)

_DOTTED_IDENTIFIER_REGEX = re.compile(r'[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*')


class _IdentifierVisitor(ast.NodeVisitor):
    """
    Collects identifiers (ast.Name) and qualified identifiers (ast.Attribute
    chains) from a parsed expression tree.
    """
    def __init__(self):
        self.identifiers: Set[str] = set()

    def _attribute_chain(self, node: ast.Attribute) -> str:
        """
        Rebuilds the dot-separated identifier of an attribute chain
        (e.g., "Population.Size"). Returns "" if the chain is not rooted in a
        plain name, e.g. `(a+b).c` or `f().c`.
        """
        parts = []
        curr = node
        while isinstance(curr, ast.Attribute):
            parts.append(curr.attr)
            curr = curr.value
        if isinstance(curr, ast.Name):
            parts.append(curr.id)
            return ".".join(reversed(parts))
        return ""

    def visit_Name(self, node: ast.Name):
        self.identifiers.add(node.id)

    def visit_Attribute(self, node: ast.Attribute):
        full_chain = self._attribute_chain(node)
        if full_chain:
            self.identifiers.add(full_chain)
        else:
            # Complex base expression: descend to find the names inside it.
            self.generic_visit(node)


class ASTDependencyExtractor:
    """
    A stateless service returning the identifiers referenced by a bound expression.
    """
    def get_identifiers(self, expression_str: str) -> Set[str]:
        """
        Returns the set of identifiers found in `expression_str`.

        e.g., for "Population.Size * rate + 1" it returns
        {'Population.Size', 'rate'}.

        Unlike a plain substring test, a parameter named `rate` is not found in
        "learningrate * 2".
        """
        if not expression_str or not expression_str.strip():
            return set()

        try:
            tree = ast.parse(expression_str.strip(), mode='eval')
        except SyntaxError:
            logger.debug("Expression '%s' is not valid Python; falling back to regex tokenization.", expression_str)
            return set(_DOTTED_IDENTIFIER_REGEX.findall(expression_str))

        visitor = _IdentifierVisitor()
        visitor.visit(tree)
        return visitor.identifiers

    def references(self, expression_str: str, identifier: str) -> bool:
        """
        True if `identifier` occurs in the expression as a whole token, either
        standalone or as the leading or trailing segment of a dotted chain.
        """
        for token in self.get_identifiers(expression_str):
            if token == identifier:
                return True
            if token.startswith(identifier + ".") or token.endswith("." + identifier):
                return True
        return False
