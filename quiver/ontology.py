"""
The run-time value domain, kept apart from the syntax so that
everything else can import it without circularity.

A value is either a constructor application (a Tagged) or an opaque
literal which plays itself. Values are built bottom-up and never
mutated, so no cyclic value graph can exist.
"""
from typing import NamedTuple, Union

class Tagged(NamedTuple):
	""" A constructor application: the constructor's name and its field values in order. """
	tag: str
	fields: tuple = ()

	def __repr__(self): return render(self)
	def __str__(self): return render(self)

LITERAL = Union[int, float, str, bool]
VALUE = Union[Tagged, LITERAL]

def size(value:VALUE) -> int:
	"""
	The number of constructor applications within a value.
	Every arrow-driven call strictly decreases this for the slot it replaces.
	"""
	count = 0
	work = [value]
	while work:
		item = work.pop()
		if isinstance(item, Tagged):
			count += 1
			work.extend(item.fields)
	return count

_CLOSE = object()
_COMMA = object()

def render(value:VALUE) -> str:
	"""
	Text like S(S(O)) or Cons(1, Nil).
	Works by explicit stack because values may nest far deeper than Python recursion allows.
	"""
	out = []
	work = [value]
	while work:
		item = work.pop()
		if item is _CLOSE: out.append(")")
		elif item is _COMMA: out.append(", ")
		elif isinstance(item, Tagged):
			out.append(item.tag)
			if item.fields:
				out.append("(")
				work.append(_CLOSE)
				for i, f in enumerate(reversed(item.fields)):
					if i: work.append(_COMMA)
					work.append(f)
		else: out.append(repr(item))
	return ''.join(out)
