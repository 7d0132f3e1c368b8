"""
The static checks. A program must pass all of these before anything may evaluate it.

Every pass reports into the same Report and carries on regardless,
so that the caller sees every problem in one batch.

* Function table: duplicate or empty definitions, ragged clause arity.
* Patterns: arrows sit beneath a constructor, bind plainly, constructors exist with proper arity.
* Bodies: every word means something, and no function names itself.
* Call graph: no cycles among distinct functions.
"""
from typing import NamedTuple, Optional, Iterable
from boozetools.support.foundation import Visitor, strongly_connected_components_hashable
from . import syntax, primitive
from .syntax import Program, Function
from .space import Layer, AlreadyExists
from .registry import DataTypeRegistry, build_registry
from .intermediate import translate_function
from .diagnostics import (
	Report, ValidationError, ProgramRejected,
	ArrowAtTopLevelError, IllegalArrowBindingError, ArityMismatchError,
	UnknownConstructorError, UnknownTypeError, UnknownFunctionError,
	UnboundVariableError, DuplicateBindingError, IllegalSelfCallError,
	CyclicDependencyError, DuplicateFunctionError, EmptyFunctionError,
)

CallGraph = dict[str, set[str]]

class TopDown(Visitor):
	"""
	Convenience base-class to handle the dreary bits of a
	perfectly ordinary top-down walk through a clause body.
	"""
	def visit_Literal(self, it:syntax.Literal, *args): pass
	def visit_Ref(self, it:syntax.Ref, *args): pass

	def visit_Construct(self, it:syntax.Construct, *args):
		for a in it.args: self.visit(a, *args)

	def visit_Call(self, it:syntax.Call, *args):
		for a in it.args: self.visit(a, *args)

class _Site(NamedTuple):
	function: str
	clause: int

	def complain(self, report:Report, kind, message:str):
		report.issue(kind(message, function=self.function, clause=self.clause))

def _binds_plainly(pattern) -> bool:
	""" True if the pattern cannot fail and contains no arrow: only wildcards, variables, and as-patterns thereof. """
	while isinstance(pattern, syntax.As): pattern = pattern.pattern
	return isinstance(pattern, (syntax.Wildcard, syntax.Bind))

class PatternCheck(Visitor):
	"""
	Walks the patterns of one clause, collecting the names they bind.
	`depth` counts the constructor patterns enclosing the current position.
	"""
	bound: Layer[syntax.PATTERN]

	def __init__(self, registry:DataTypeRegistry, site:_Site, report:Report):
		self._registry = registry
		self._site = site
		self._report = report
		self.bound = Layer()

	def check(self, patterns:Iterable[syntax.PATTERN]):
		for p in patterns:
			self.visit(p, 0, False)
		return self.bound

	def _bind(self, name:str, pattern):
		try: self.bound.mount(name, pattern)
		except AlreadyExists:
			self._site.complain(self._report, DuplicateBindingError, "Variable '%s' is bound more than once." % name)

	def visit_Wildcard(self, it:syntax.Wildcard, depth:int, in_arrow:bool): pass

	def visit_Bind(self, it:syntax.Bind, depth:int, in_arrow:bool):
		self._bind(it.name, it)

	def visit_As(self, it:syntax.As, depth:int, in_arrow:bool):
		self._bind(it.name, it)
		self.visit(it.pattern, depth, in_arrow)

	def visit_Match(self, it:syntax.Match, depth:int, in_arrow:bool):
		if self._registry.has_constructor(it.constructor):
			_, arity = self._registry.lookup_constructor(it.constructor)
			if arity != len(it.subpatterns):
				pattern = "Pattern %r gives %d sub-pattern(s), but constructor '%s' has %d field(s)."
				self._site.complain(self._report, ArityMismatchError, pattern % (it, len(it.subpatterns), it.constructor, arity))
		else:
			self._site.complain(self._report, UnknownConstructorError, "Pattern %r names no known constructor." % (it,))
		for sub in it.subpatterns:
			self.visit(sub, depth+1, in_arrow)

	def visit_Arrow(self, it:syntax.Arrow, depth:int, in_arrow:bool):
		if not in_arrow:
			if depth == 0:
				message = "Arrow pattern %r cannot replace the entire pattern for a parameter; put it inside a constructor pattern." % (it,)
				self._site.complain(self._report, ArrowAtTopLevelError, message)
			if not _binds_plainly(it.pattern):
				message = "Arrow pattern %r binds the result of a recursive call, so within it use only variables, wildcards and as-patterns." % (it,)
				self._site.complain(self._report, IllegalArrowBindingError, message)
		self.visit(it.pattern, depth, True)

class BodyCheck(TopDown):
	""" Resolves the words in one clause body and notes the calls it makes. """

	def __init__(self, registry:DataTypeRegistry, functions:Layer[Function], site:_Site, bound:Layer, report:Report):
		self._registry = registry
		self._functions = functions
		self._site = site
		self._bound = bound
		self._report = report
		self.callees = set()

	def _complain(self, kind, message):
		self._site.complain(self._report, kind, message)

	def visit_Ref(self, it:syntax.Ref):
		if it.name not in self._bound:
			self._complain(UnboundVariableError, "Variable '%s' is not bound by any pattern of this clause." % it.name)

	def visit_Construct(self, it:syntax.Construct):
		if self._registry.has_constructor(it.constructor):
			_, arity = self._registry.lookup_constructor(it.constructor)
			if arity != len(it.args):
				self._complain(ArityMismatchError, "Constructor '%s' takes %d field(s), but %r gives %d." % (it.constructor, arity, it, len(it.args)))
		else:
			self._complain(UnknownConstructorError, "%r names no known constructor." % (it,))
		super().visit_Construct(it)

	def visit_Call(self, it:syntax.Call):
		name = it.function
		if name == self._site.function:
			self._complain(IllegalSelfCallError, "Function '%s' calls itself by name. Recur through an arrow pattern instead." % name)
		else:
			callee = self._functions.symbol(name)
			if callee is not None:
				self.callees.add(name)
				arity = callee.arity()
			else:
				prim = primitive.root_layer.symbol(name)
				if prim is None:
					self._complain(UnknownFunctionError, "There is no function called '%s'." % name)
					arity = None
				else: arity = prim.arity
			if arity is not None and arity != len(it.args):
				self._complain(ArityMismatchError, "'%s' takes %d argument(s), but %r gives %d." % (name, arity, it, len(it.args)))
		super().visit_Call(it)

def check_types(registry:DataTypeRegistry, report:Report):
	for dt in registry.each_type():
		for c in dt.constructors:
			for field in c.fields:
				if not registry.knows_type(field):
					message = "Field type '%s' of constructor '%s' in type '%s' is not a known type."
					report.issue(UnknownTypeError(message % (field, c.name, dt.name)))

def function_table(functions:Iterable[Function], report:Report) -> Layer[Function]:
	table = Layer()
	scope = table.atop(primitive.root_layer)
	for fn in functions:
		try: scope.mount(fn.name, fn)
		except AlreadyExists:
			kind = "a primitive" if fn.name in primitive.root_layer else "another function"
			report.issue(DuplicateFunctionError("Function '%s' has the same name as %s." % (fn.name, kind), function=fn.name))
			continue
		if not fn.clauses:
			report.issue(EmptyFunctionError("Function '%s' has no clauses." % fn.name, function=fn.name))
			continue
		arity = fn.arity()
		for index, c in enumerate(fn.clauses):
			if c.arity() != arity:
				pattern = "This clause has %d pattern(s), but the first clause has %d."
				report.issue(ArityMismatchError(pattern % (c.arity(), arity), function=fn.name, clause=index))
	return table

def check_clauses(registry:DataTypeRegistry, table:Layer[Function], report:Report) -> CallGraph:
	call_graph = {}
	for fn in table.each_symbol():
		callees = call_graph[fn.name] = set()
		for index, c in enumerate(fn.clauses):
			site = _Site(fn.name, index)
			bound = PatternCheck(registry, site, report).check(c.patterns)
			body = BodyCheck(registry, table, site, bound, report)
			body.visit(c.body)
			callees.update(body.callees)
	return call_graph

def _cycle_within(component:set[str], start:str, graph:CallGraph) -> list[str]:
	""" Breadth-first from start, staying inside one strongly-connected component, until the path comes back around. """
	parent = {}
	frontier = [start]
	while frontier:
		successors = []
		for node in frontier:
			for nxt in sorted(graph[node] & component):
				if nxt == start:
					path = [node]
					while path[-1] != start: path.append(parent[path[-1]])
					path.reverse()
					return path
				if nxt not in parent:
					parent[nxt] = node
					successors.append(nxt)
		frontier = successors
	raise AssertionError("Not strongly connected: %r" % component)

def report_cycles(graph:CallGraph, report:Report):
	position = {name:i for i, name in enumerate(graph)}
	for scc in strongly_connected_components_hashable(graph):
		# Self-calls are never edges, so a cycle always involves several functions.
		if len(scc) > 1:
			start = min(scc, key=position.__getitem__)
			cycle = _cycle_within(set(scc), start, graph)
			message = "These functions call each other in a circle: %s" % " -> ".join(cycle + [start])
			report.issue(CyclicDependencyError(message, cycle))

def validate(program:Program, report:Optional[Report]=None) -> list[ValidationError]:
	report = Report() if report is None else report
	_validate(program, report)
	return report.issues

def _validate(program:Program, report:Report):
	report.info("Validate", "%d type(s), %d function(s)" % (len(program.types), len(program.functions)))
	registry = build_registry(program.types, report)
	check_types(registry, report)
	table = function_table(program.functions, report)
	call_graph = check_clauses(registry, table, report)
	report.info("Call graph", sum(map(len, call_graph.values())), "edge(s)")
	report_cycles(call_graph, report)
	return registry.freeze(), table

class LoadedProgram:
	"""
	A program that passed validation, along with what the evaluator needs.
	Nothing here changes after construction.
	"""
	def __init__(self, registry:DataTypeRegistry, table:Layer[Function]):
		assert registry.frozen
		self.registry = registry
		self.functions = {fn.name: fn for fn in table.each_symbol()}
		self.code = {name: translate_function(fn, self.functions) for name, fn in self.functions.items()}

def load_program(program:Program, report:Optional[Report]=None) -> LoadedProgram:
	report = Report() if report is None else report
	registry, table = _validate(program, report)
	if report.sick(): raise ProgramRejected(report.issues)
	return LoadedProgram(registry, table)
