import sys, random
from typing import Sequence, Optional
from boozetools.support.failureprone import Issue, Severity

from .ontology import render

class QuiverError(Exception):
	pass

###############################################################################
# Static tier: the validator collects these rather than raising them,
# although the registry raises the two duplicate-definition errors directly.

class ValidationError(QuiverError):
	""" Something wrong with the program as written. Never reached by evaluation. """
	phase = "validating"
	def __init__(self, message:str, *, function:Optional[str]=None, clause:Optional[int]=None):
		super().__init__(message)
		self.function = function
		self.clause = clause

	def where(self) -> str:
		if self.function is None: return ""
		if self.clause is None: return "In function '%s': " % self.function
		return "In clause %d of function '%s': " % (self.clause, self.function)

	def __str__(self): return self.where() + self.args[0]

class ArrowAtTopLevelError(ValidationError):
	pass

class IllegalArrowBindingError(ValidationError):
	pass

class ArityMismatchError(ValidationError):
	pass

class UnknownConstructorError(ValidationError):
	pass

class UnknownTypeError(ValidationError):
	pass

class UnknownFunctionError(ValidationError):
	pass

class UnboundVariableError(ValidationError):
	pass

class DuplicateBindingError(ValidationError):
	pass

class IllegalSelfCallError(ValidationError):
	pass

class CyclicDependencyError(ValidationError):
	def __init__(self, message:str, cycle:Sequence[str]):
		super().__init__(message)
		self.cycle = tuple(cycle)

class DuplicateTypeError(ValidationError):
	phase = "registering types"

class DuplicateConstructorError(ValidationError):
	phase = "registering types"

class DuplicateFunctionError(ValidationError):
	pass

class EmptyFunctionError(ValidationError):
	pass

class RegistryFrozenError(ValidationError):
	phase = "registering types"

class ProgramRejected(QuiverError):
	""" The program failed validation; .issues has the whole list. """
	def __init__(self, issues:Sequence[ValidationError]):
		super().__init__("%d issue(s) found while validating" % len(issues))
		self.issues = list(issues)

###############################################################################
# Run-time tier.

class EvaluationError(QuiverError):
	pass

class NoMatchError(EvaluationError):
	def __init__(self, function:str, args:Sequence, trace:Sequence[tuple]=()):
		self.function = function
		self.arguments = tuple(args)
		self.trace = tuple(trace)
		lines = ["No clause of '%s' matches %s" % (function, _render_args(args))]
		for name, caller_args in self.trace[:TRACE_LIMIT]:
			lines.append("  called from %s%s" % (name, _render_args(caller_args)))
		if len(self.trace) > TRACE_LIMIT:
			lines.append("  ... and %d more" % (len(self.trace) - TRACE_LIMIT))
		super().__init__("\n".join(lines))

TRACE_LIMIT = 8

def _render_args(args) -> str:
	return "(%s)" % ", ".join(map(render, args))

class PrimitiveError(EvaluationError):
	""" A primitive operation refused its operands, as when dividing by zero. """
	def __init__(self, function:str, primitive:str, operands:Sequence, cause:Exception):
		self.function = function
		self.primitive = primitive
		self.operands = tuple(operands)
		pattern = "In '%s', primitive '%s' failed on %s: %s"
		super().__init__(pattern % (function, primitive, _render_args(operands), cause))

class ExhaustionError(EvaluationError):
	""" An implementation resource ran out. This says nothing about the program's meaning. """

class StackExhaustionError(ExhaustionError):
	def __init__(self, function:str, limit:int):
		super().__init__("More than %d pending activations while evaluating '%s'" % (limit, function))
		self.function = function
		self.limit = limit

class StepBudgetError(ExhaustionError):
	def __init__(self, function:str, limit:int):
		super().__init__("Evaluating '%s' took more than %d steps" % (function, limit))
		self.function = function
		self.limit = limit

class EvaluationCancelled(ExhaustionError):
	def __init__(self, function:str, steps:int):
		super().__init__("Evaluation of '%s' cancelled after %d steps" % (function, steps))
		self.function = function
		self.steps = steps

###############################################################################

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Hmm. ", "", ""]
	exclamation = [
		'Bother', 'Blast', 'Criminy', 'Dash it', 'Drat', 'Fiddle-dee-dee',
		'Goodness', 'Gosh', 'Great Scott', 'Hang it', 'Jinkies', 'Phooey',
		'Rats', 'Shucks', 'Sufferin\' Succotash', 'Zounds',
	]
	resignations = [
		'This program does not hold together.',
		'I will not run this.',
		'Some arrows miss their mark.',
		'That cannot be proven to stop.',
	]
	return "%s%s! %s"%tuple(map(random.choice, (particle, exclamation, resignations)))

class Report:
	""" Collects validation issues so that the caller gets the complete batch. """
	_issues: list[ValidationError]

	def __init__(self, *, verbose:int=0, max_issues:Optional[int]=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	@property
	def issues(self) -> list[ValidationError]: return list(self._issues)

	def issue(self, it:ValidationError):
		assert isinstance(it, ValidationError), it
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		if self._issues:
			print("*"*60, file=sys.stderr)
			print(_outburst(), file=sys.stderr)
		for it in self._issues:
			print("  -"*20, file=sys.stderr)
			print(as_issue(it).as_text(_no_source), file=sys.stderr)
		sys.stderr.flush()

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

def as_issue(error:ValidationError) -> Issue:
	# Programs arrive pre-parsed, so there is no source text to excerpt.
	return Issue(error.phase, Severity.ERROR, "%s: %s" % (type(error).__name__, error), {})

def _no_source(key):
	raise KeyError(key)
