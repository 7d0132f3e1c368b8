"""
Activation records for the evaluator's explicit call stack.
Each one lives on the heap, so the depth of arrow-driven recursion
costs list entries rather than Python stack frames.
"""
from typing import Optional
from .ontology import VALUE
from .matching import Bindings, bind_result

class Activation:
	"""
	One pending invocation. It first works through its arrow sites,
	one recursive call apiece, and then runs the chosen clause's code.
	"""
	dynamic_link: Optional["Activation"]
	pc: int = 0
	next_arrow: int = 0

	def __init__(self, function:str, args:tuple[VALUE, ...], clause:int, bindings:Bindings, code:tuple, dynamic_link:Optional["Activation"]):
		self.function = function
		self.args = args
		self.clause = clause
		self.env = bindings.env
		self.arrows = bindings.arrows
		self.code = code
		self.dynamic_link = dynamic_link
		self.operands = []

	def __repr__(self): return "<%s#%d pc=%d>" % (self.function, self.clause, self.pc)

	def recursion_pending(self) -> bool:
		return self.next_arrow < len(self.arrows)

	def recursive_args(self) -> tuple[VALUE, ...]:
		""" Same as this invocation's arguments, but with one slot replaced by the arrow's sub-term. """
		site = self.arrows[self.next_arrow]
		args = list(self.args)
		args[site.slot] = site.subterm
		return tuple(args)

	def receive(self, value:VALUE):
		""" Accept the result of whatever call this activation was waiting on. """
		if self.recursion_pending():
			bind_result(self.arrows[self.next_arrow].pattern, value, self.env)
			self.next_arrow += 1
		else:
			self.operands.append(value)

	def fetch(self, name:str) -> VALUE:
		return self.env[name]

	def pop_operands(self, n:int) -> tuple[VALUE, ...]:
		if not n: return ()
		taken = tuple(self.operands[-n:])
		del self.operands[-n:]
		return taken

	def trace(self) -> list[tuple[str, tuple]]:
		""" This invocation and the chain of its callers, innermost first. """
		crumbs = []
		frame = self
		while frame is not None:
			crumbs.append((frame.function, frame.args))
			frame = frame.dynamic_link
		return crumbs
