"""
The abstract syntax that the core consumes.
Some front-end (not part of this package) is expected to build these bottom-up,
as are the tests. Patterns and expressions are closed sets of variants:
every pass dispatches on exactly these classes and nothing else.

The lower-case functions at the bottom are shorthand for assembling programs
by hand without drowning in tuple punctuation.
"""
from typing import NamedTuple, Union, Any, Sequence, Iterable

###############################################################################
# Patterns

class Wildcard(NamedTuple):
	def __repr__(self): return "_"

class Bind(NamedTuple):
	name: str
	def __repr__(self): return self.name

class Match(NamedTuple):
	""" Succeeds only on a value built by exactly this constructor. """
	constructor: str
	subpatterns: tuple = ()
	def __repr__(self):
		if self.subpatterns: return "%s(%s)" % (self.constructor, ", ".join(map(repr, self.subpatterns)))
		return self.constructor

class As(NamedTuple):
	""" Binds the whole value in addition to matching the sub-pattern against it. """
	name: str
	pattern: "PATTERN"
	def __repr__(self): return "%s@%r" % (self.name, self.pattern)

class Arrow(NamedTuple):
	"""
	Marks a sub-term for structural recursion. The enclosing function gets
	called again with this sub-term in place of the original argument, and
	the inner pattern binds whatever that call returns.
	"""
	pattern: "PATTERN"
	def __repr__(self): return "->%r" % (self.pattern,)

PATTERN = Union[Wildcard, Bind, Match, As, Arrow]
WILDCARD = Wildcard()

###############################################################################
# Body expressions

class Literal(NamedTuple):
	value: Any
	def __repr__(self): return repr(self.value)

class Ref(NamedTuple):
	name: str
	def __repr__(self): return self.name

class Construct(NamedTuple):
	constructor: str
	args: tuple = ()
	def __repr__(self):
		if self.args: return "%s(%s)" % (self.constructor, ", ".join(map(repr, self.args)))
		return self.constructor

class Call(NamedTuple):
	""" Calls some other function or a primitive; never the enclosing function. """
	function: str
	args: tuple = ()
	def __repr__(self): return "%s(%s)" % (self.function, ", ".join(map(repr, self.args)))

EXPRESSION = Union[Literal, Ref, Construct, Call]

###############################################################################
# Definitions

class Clause(NamedTuple):
	patterns: tuple[PATTERN, ...]
	body: EXPRESSION
	def arity(self): return len(self.patterns)
	def __repr__(self): return "(%s) = %r" % (", ".join(map(repr, self.patterns)), self.body)

class Function(NamedTuple):
	""" First matching clause wins, so order is significant. """
	name: str
	clauses: tuple[Clause, ...]
	def arity(self) -> int:
		return self.clauses[0].arity() if self.clauses else 0
	def __repr__(self): return "{fn|%s/%d}" % (self.name, self.arity())

class Constructor(NamedTuple):
	name: str
	fields: tuple[str, ...] = ()  # Names of field types.
	def arity(self): return len(self.fields)

class DataType(NamedTuple):
	name: str
	constructors: tuple[Constructor, ...]
	def __repr__(self): return "<type %s>" % self.name

class Program(NamedTuple):
	"""
	Exactly what the front-end hands over. Duplicate names are possible
	at this stage; the validator complains about them.
	"""
	types: tuple[DataType, ...] = ()
	functions: tuple[Function, ...] = ()

	def extend(self, types:Iterable[DataType]=(), functions:Iterable[Function]=()) -> "Program":
		return Program(self.types + tuple(types), self.functions + tuple(functions))

###############################################################################
# Shorthand

def _pattern(p) -> PATTERN:
	# A bare string is a variable; "_" is the wildcard.
	if isinstance(p, str): return WILDCARD if p == "_" else Bind(p)
	return p

def _expression(x) -> EXPRESSION:
	if isinstance(x, str): return Ref(x)
	if isinstance(x, (Literal, Ref, Construct, Call)): return x
	return Literal(x)

def match(constructor:str, *subpatterns) -> Match:
	return Match(constructor, tuple(map(_pattern, subpatterns)))

def arrow(inner="_") -> Arrow:
	return Arrow(_pattern(inner))

def alias(name:str, pattern) -> As:
	return As(name, _pattern(pattern))

def make(constructor:str, *args) -> Construct:
	return Construct(constructor, tuple(map(_expression, args)))

def call(function:str, *args) -> Call:
	return Call(function, tuple(map(_expression, args)))

def clause(patterns:Sequence, body) -> Clause:
	return Clause(tuple(map(_pattern, patterns)), _expression(body))

def function(name:str, *clauses:Clause) -> Function:
	return Function(name, tuple(clauses))

def datatype(name:str, **constructors:Sequence[str]) -> DataType:
	""" datatype("Nat", O=(), S=("Nat",)) -- keyword order is constructor order. """
	return DataType(name, tuple(Constructor(k, tuple(v)) for k, v in constructors.items()))
