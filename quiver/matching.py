"""
Clause selection. Matching is a shape test only: it never evaluates anything.
Arrow patterns always succeed here; they just leave a note of which sub-term
they cover, and the evaluator makes the recursive calls once the clause is chosen.
"""
from typing import NamedTuple, Optional, Sequence
from boozetools.support.foundation import Visitor
from .ontology import Tagged, VALUE
from . import syntax

class ArrowSite(NamedTuple):
	depth: int  # Number of constructor patterns enclosing the arrow
	slot: int  # Which parameter the arrow lives within
	subterm: VALUE
	pattern: syntax.PATTERN  # Binds the result of the recursive call.

class Bindings(NamedTuple):
	env: dict[str, VALUE]
	arrows: tuple[ArrowSite, ...]

class Matcher(Visitor):
	def __init__(self):
		self.env = {}
		self.arrows = []

	def visit_Wildcard(self, it:syntax.Wildcard, value, slot:int, depth:int):
		return True

	def visit_Bind(self, it:syntax.Bind, value, slot:int, depth:int):
		self.env[it.name] = value
		return True

	def visit_As(self, it:syntax.As, value, slot:int, depth:int):
		self.env[it.name] = value
		return self.visit(it.pattern, value, slot, depth)

	def visit_Match(self, it:syntax.Match, value, slot:int, depth:int):
		if not (isinstance(value, Tagged) and value.tag == it.constructor): return False
		if len(value.fields) != len(it.subpatterns): return False
		for sub, field in zip(it.subpatterns, value.fields):
			if not self.visit(sub, field, slot, depth+1): return False
		return True

	def visit_Arrow(self, it:syntax.Arrow, value, slot:int, depth:int):
		self.arrows.append(ArrowSite(depth, slot, value, it.pattern))
		return True

def match_clause(patterns:Sequence[syntax.PATTERN], args:Sequence[VALUE]) -> Optional[Bindings]:
	matcher = Matcher()
	for slot, (p, v) in enumerate(zip(patterns, args)):
		if not matcher.visit(p, v, slot, 0): return None
	# Outer arrows before inner; the sort is stable, so left-to-right otherwise.
	matcher.arrows.sort(key=lambda site: site.depth)
	return Bindings(matcher.env, tuple(matcher.arrows))

def bind_result(pattern:syntax.PATTERN, result:VALUE, env:dict[str, VALUE]):
	""" Only plain patterns get here, which the validator guarantees. """
	while isinstance(pattern, syntax.As):
		env[pattern.name] = result
		pattern = pattern.pattern
	if isinstance(pattern, syntax.Bind):
		env[pattern.name] = result
	else:
		assert isinstance(pattern, syntax.Wildcard), pattern
