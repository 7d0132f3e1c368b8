"""
Build the primitive namespace: the opaque literal types
and the operations on them that clause bodies may call.
"""
import operator
from typing import NamedTuple, Callable
from .space import Layer

class Primitive(NamedTuple):
	name: str
	arity: int
	fn: Callable

# "any" is for fields whose type the (external) type-checker alone cares about.
opaque_types = ("number", "string", "flag", "any")

root_layer: Layer[Primitive] = Layer()

def _built_in(name:str, arity:int, fn:Callable):
	root_layer.mount(name, Primitive(name, arity, fn))

for _glyph, _fn in {
	"^": operator.pow,
	"*": operator.mul,
	"/": operator.truediv,
	"DIV": operator.floordiv,
	"MOD": operator.mod,
	"+": operator.add,
	"-": operator.sub,
	"==": operator.eq,
	"!=": operator.ne,
	"<=": operator.le,
	"<": operator.lt,
	">=": operator.ge,
	">": operator.gt,
	"max": max,
	"min": min,
}.items(): _built_in(_glyph, 2, _fn)

_built_in("negate", 1, operator.neg)
_built_in("NOT", 1, operator.not_)
_built_in("abs", 1, abs)
