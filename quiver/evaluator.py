"""
The clause-matching evaluator.

Every invocation, whether arrow-driven or a call to some other function,
becomes an Activation on an explicit stack. The loop below is the only
place where recursion happens, and it never recurses in Python.

Why it stops: calls among distinct functions follow an acyclic graph,
and every arrow-driven call replaces one argument with a strict sub-term
of itself, so the number of constructor applications in that slot
goes down every time. The limits exist for the finite-but-enormous case.
"""
from typing import NamedTuple, Optional, Sequence
from .ontology import Tagged, VALUE
from .syntax import Program
from .intermediate import LIT, LOAD, MAKE, PRIM, CALL
from .matching import match_clause
from .stacking import Activation
from .resolution import LoadedProgram, load_program
from .diagnostics import (
	Report, NoMatchError, PrimitiveError, StackExhaustionError, StepBudgetError, EvaluationCancelled,
	UnknownFunctionError, ArityMismatchError,
)

class Limits(NamedTuple):
	max_depth: int = 100_000  # Pending activations, all told.
	max_steps: Optional[int] = None  # None means no step budget.
	check_interval: int = 1024  # How often to look at the cancellation flag.

class _Budget:
	""" Per-invocation step counting. Never shared between invocations. """
	def __init__(self, function:str, limits:Limits, cancel):
		self.function = function
		self.steps = 0
		self._max_steps = limits.max_steps
		self._interval = limits.check_interval
		self._cancel = cancel

	def tick(self):
		self.steps += 1
		if self._max_steps is not None and self.steps > self._max_steps:
			raise StepBudgetError(self.function, self._max_steps)
		if self._cancel is not None and not self.steps % self._interval and self._cancel.is_set():
			raise EvaluationCancelled(self.function, self.steps)

_NOTHING = object()

class Evaluator:
	"""
	Runs functions of a validated program. Holds no per-call state,
	so several threads may share one instance.
	"""
	def __init__(self, loaded:LoadedProgram, *, limits:Limits=Limits(), report:Optional[Report]=None):
		assert isinstance(loaded, LoadedProgram), type(loaded)
		if limits.max_depth < 1 or limits.check_interval < 1:
			raise ValueError("Limits need a positive max_depth and check_interval: %r" % (limits,))
		self._loaded = loaded
		self._limits = limits
		self._report = Report() if report is None else report

	@classmethod
	def from_program(cls, program:Program, *, limits:Limits=Limits(), report:Optional[Report]=None) -> "Evaluator":
		""" Validate first. Raises ProgramRejected if the program has any issue. """
		return cls(load_program(program, report), limits=limits, report=report)

	@property
	def program(self) -> LoadedProgram: return self._loaded

	def evaluate(self, function_name:str, arguments:Sequence[VALUE], *, cancel=None) -> VALUE:
		"""
		`cancel` may be anything with an `is_set()` method, such as a threading.Event.
		It is consulted every so often; if set, the whole invocation is abandoned.
		"""
		args = tuple(arguments)
		self._check_entry(function_name, args)
		budget = _Budget(function_name, self._limits, cancel)
		max_depth = self._limits.max_depth
		stack = [self._activate(function_name, args, None, budget)]
		value = _NOTHING
		while True:
			frame = stack[-1]
			if value is not _NOTHING:
				frame.receive(value)
				value = _NOTHING
			callee = self._advance(frame, budget)
			if callee is None:
				value = frame.operands.pop()
				assert not frame.operands, frame
				stack.pop()
				if not stack: break
			elif len(stack) >= max_depth:
				raise StackExhaustionError(function_name, max_depth)
			else:
				name, callee_args = callee
				stack.append(self._activate(name, callee_args, frame, budget))
		self._report.info("Evaluate", function_name, "took", budget.steps, "step(s)")
		return value

	def _check_entry(self, function_name:str, args:tuple):
		fn = self._loaded.functions.get(function_name)
		if fn is None:
			raise UnknownFunctionError("There is no function called '%s'." % function_name)
		if fn.arity() != len(args):
			raise ArityMismatchError("'%s' takes %d argument(s), but got %d." % (function_name, fn.arity(), len(args)))

	def _activate(self, name:str, args:tuple, caller:Optional[Activation], budget:_Budget) -> Activation:
		""" Choose the first clause that matches. """
		budget.tick()
		for index, compiled in enumerate(self._loaded.code[name]):
			bindings = match_clause(compiled.patterns, args)
			if bindings is not None:
				return Activation(name, args, index, bindings, compiled.code, caller)
		raise NoMatchError(name, args, caller.trace() if caller else ())

	@staticmethod
	def _advance(frame:Activation, budget:_Budget):
		"""
		Run the frame until it needs the result of a call, in which case
		return the callee and its arguments, or else until its code is done.
		"""
		if frame.recursion_pending():
			return frame.function, frame.recursive_args()
		code = frame.code
		operands = frame.operands
		while frame.pc < len(code):
			budget.tick()
			instruction = code[frame.pc]
			frame.pc += 1
			op = instruction[0]
			if op == LIT:
				operands.append(instruction[1])
			elif op == LOAD:
				operands.append(frame.fetch(instruction[1]))
			elif op == MAKE:
				operands.append(Tagged(instruction[1], frame.pop_operands(instruction[2])))
			elif op == PRIM:
				prim, taken = instruction[1], frame.pop_operands(instruction[2])
				try: operands.append(prim.fn(*taken))
				except ArithmeticError as ex: raise PrimitiveError(frame.function, prim.name, taken, ex) from ex
			elif op == CALL:
				return instruction[1], frame.pop_operands(instruction[2])
			else:
				assert False, instruction
		return None
