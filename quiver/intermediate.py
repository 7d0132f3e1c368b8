"""
Translate clause bodies into straight-line postfix code for the evaluator.

A body is a tree of literals, variable references, constructor applications and calls.
Post-order emission turns that into a flat sequence of instructions over an operand stack,
so the evaluator can suspend at any CALL without leaning on the Python call stack:

	LIT   value       push a literal
	LOAD  name        push the value bound to a pattern variable
	MAKE  tag n       pop n operands, push the constructor application
	PRIM  primitive n pop n operands, push the primitive's result
	CALL  function n  pop n operands, suspend until the callee returns, push its result
"""
from typing import NamedTuple
from boozetools.support.foundation import Visitor
from . import syntax, primitive

LIT, LOAD, MAKE, PRIM, CALL = "LIT", "LOAD", "MAKE", "PRIM", "CALL"

class CompiledClause(NamedTuple):
	patterns: tuple[syntax.PATTERN, ...]
	code: tuple[tuple, ...]

class Translation(Visitor):
	def __init__(self, functions:dict[str, syntax.Function]):
		self._functions = functions
		self._code = []

	def emit(self, *instruction):
		self._code.append(instruction)

	def translate(self, body:syntax.EXPRESSION) -> tuple[tuple, ...]:
		self._code = []
		self.visit(body)
		return tuple(self._code)

	def visit_Literal(self, it:syntax.Literal):
		self.emit(LIT, it.value)

	def visit_Ref(self, it:syntax.Ref):
		self.emit(LOAD, it.name)

	def visit_Construct(self, it:syntax.Construct):
		for a in it.args: self.visit(a)
		self.emit(MAKE, it.constructor, len(it.args))

	def visit_Call(self, it:syntax.Call):
		for a in it.args: self.visit(a)
		if it.function in self._functions:
			self.emit(CALL, it.function, len(it.args))
		else:
			self.emit(PRIM, primitive.root_layer[it.function], len(it.args))

def translate_function(fn:syntax.Function, functions:dict[str, syntax.Function]) -> tuple[CompiledClause, ...]:
	translation = Translation(functions)
	return tuple(CompiledClause(c.patterns, translation.translate(c.body)) for c in fn.clauses)
