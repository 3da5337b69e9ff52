"""Schema-driven rewrites of declaration trees.

Each rewriter reads a semantic view of ``program`` and returns a new
program; the input tree is left untouched.
"""

from __future__ import annotations

from dataclasses import replace

from tessera.semantics import NodePath, SemanticView
from tessera.syntax.nodes import ArrayExpr, Expression, ObjectExpr, Program, PropertyExpr


class SyntaxRewriter:
    def __init__(self, view: SemanticView) -> None:
        self.view = view
        self._declaration_index = 0

    def rewrite(self, program: Program) -> Program:
        declarations = []
        for index, declaration in enumerate(program.declarations):
            self._declaration_index = index
            body = self.rewrite_expression(declaration.body, ())
            declarations.append(
                declaration if body is declaration.body else replace(declaration, body=body)
            )
        return replace(program, declarations=tuple(declarations))

    def rewrite_expression(self, node: Expression, path: NodePath) -> Expression:
        match node:
            case ObjectExpr():
                return self.rewrite_object(node, path)
            case ArrayExpr(items=items):
                rewritten = tuple(
                    self.rewrite_expression(item, path + (index,))
                    for index, item in enumerate(items)
                )
                if all(new is old for new, old in zip(rewritten, items)):
                    return node
                return replace(node, items=rewritten)
            case _:
                return node

    def rewrite_object(self, node: ObjectExpr, path: NodePath) -> ObjectExpr:
        properties: list[PropertyExpr] = []
        changed = False
        # Keys present in the input plus keys produced by renames so far.
        taken = {prop.key for prop in node.properties}
        for prop in node.properties:
            updated = self.rewrite_property(prop, path, taken)
            if updated is None:
                changed = True
                continue
            taken.add(updated.key)
            # Children are addressed by the key as written in this tree.
            value = self.rewrite_expression(prop.value, path + (prop.key,))
            if value is not prop.value:
                updated = replace(updated, value=value)
            changed = changed or updated is not prop
            properties.append(updated)
        if not changed:
            return node
        return replace(node, properties=tuple(properties))

    def rewrite_property(
        self, prop: PropertyExpr, path: NodePath, taken: set[str]
    ) -> PropertyExpr | None:
        return prop


class TypeCasingFixer(SyntaxRewriter):
    """Renames keys to the casing the schema declares."""

    def rewrite_property(
        self, prop: PropertyExpr, path: NodePath, taken: set[str]
    ) -> PropertyExpr | None:
        binding = self.view.binding(self._declaration_index, path, prop.key)
        if binding is None or binding.exact:
            return prop
        if binding.canonical_name in taken:
            # Renaming would duplicate a key already in this object.
            return prop
        return replace(prop, key=binding.canonical_name)


class ReadOnlyPropertyRemover(SyntaxRewriter):
    """Drops properties the schema marks read-only."""

    def rewrite_property(
        self, prop: PropertyExpr, path: NodePath, taken: set[str]
    ) -> PropertyExpr | None:
        binding = self.view.binding(self._declaration_index, path, prop.key)
        if binding is None or not binding.declared.read_only:
            return prop
        if binding.canonical_name in self.view.configuration.retain:
            return prop
        return None


def recase(program: Program, view: SemanticView) -> Program:
    return TypeCasingFixer(view).rewrite(program)


def prune_read_only(program: Program, view: SemanticView) -> Program:
    return ReadOnlyPropertyRemover(view).rewrite(program)
