"""
Continuous values: a state together with the rule for absorbing the next event.

This is how something like `sum 1 2 3` gets a sensible static type.
Instead of a function of unknown arity, `sum` is a continuous value whose
state is the running total, and each further argument is one more event.
"""
from typing import NamedTuple, Any, Callable, Iterable
from .ontology import VALUE

Continuation = Callable[[Any, Any], Any]

class ContinuousValue(NamedTuple):
	state: Any
	continuation: Continuation

def state(cv:ContinuousValue):
	return cv.state

def continuation(cv:ContinuousValue) -> Continuation:
	return cv.continuation

def apply_event(cv:ContinuousValue, event) -> ContinuousValue:
	""" A new continuous value; the old one is untouched. """
	return ContinuousValue(cv.continuation(cv.state, event), cv.continuation)

def apply_events(cv:ContinuousValue, events:Iterable) -> ContinuousValue:
	for event in events:
		cv = apply_event(cv, event)
	return cv

def final_value(cv:ContinuousValue, events:Iterable):
	return state(apply_events(cv, events))

def function_continuation(evaluator, name:str) -> Continuation:
	"""
	Use a two-parameter function of a loaded program as the continuation,
	so that each event is absorbed by the arrow-pattern evaluator.
	"""
	def absorb(current:VALUE, event:VALUE) -> VALUE:
		return evaluator.evaluate(name, (current, event))
	return absorb

def _add(total, n): return total + n

SUM = ContinuousValue(0, _add)

def sum_of(*numbers):
	""" The variable-arity `sum 1 2 3`, as a fold over events. """
	return final_value(SUM, numbers)
