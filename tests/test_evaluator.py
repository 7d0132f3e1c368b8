import threading
import unittest
from unittest import mock

from quiver.ontology import Tagged, size
from quiver.syntax import Literal, function, clause, match, arrow, alias, make, call
from quiver.preamble import STANDARD, O, NIL, LEAF, nat, from_nat, py_list, from_list, node
from quiver.matching import match_clause
from quiver.evaluator import Evaluator, Limits
from quiver.diagnostics import (
	Report, NoMatchError, StackExhaustionError, StepBudgetError, EvaluationCancelled,
	ExhaustionError, UnknownFunctionError, ArityMismatchError, ProgramRejected, PrimitiveError,
)

def _evaluator(*functions, types=(), **kwargs) -> Evaluator:
	return Evaluator.from_program(STANDARD.extend(types, functions), **kwargs)

class WorkedExamples(unittest.TestCase):
	""" The classic small programs, done with arrows. """

	def setUp(self) -> None:
		self.sut = _evaluator()

	def test_list_length(self):
		abc = py_list(["a", "b", "c"])
		self.assertEqual(Tagged("Cons", ("c", NIL)), abc.fields[1].fields[1])
		self.assertEqual(3, self.sut.evaluate("length", [abc]))
		self.assertEqual(0, self.sut.evaluate("length", [NIL]))

	def test_peano_addition(self):
		two = Tagged("S", (Tagged("S", (O,)),))
		three = Tagged("S", (two,))
		five = Tagged("S", (Tagged("S", (three,)),))
		self.assertEqual(five, self.sut.evaluate("plus", [two, three]))

	def test_arithmetic_on_naturals(self):
		for a, b in [(0, 0), (0, 4), (4, 0), (3, 7), (6, 6)]:
			with self.subTest(a=a, b=b):
				self.assertEqual(a + b, from_nat(self.sut.evaluate("plus", [nat(a), nat(b)])))
				self.assertEqual(a * b, from_nat(self.sut.evaluate("times", [nat(a), nat(b)])))

	def test_factorial_uses_the_alias_for_the_wrapped_value(self):
		for n, expect in [(0, 1), (1, 1), (3, 6), (5, 120)]:
			with self.subTest(n):
				self.assertEqual(expect, self.sut.evaluate("factorial", [nat(n)]))

	def test_lists(self):
		items = [5, 1, 4]
		self.assertEqual(10, self.sut.evaluate("total", [py_list(items)]))
		self.assertEqual([5, 1, 4, 7], from_list(self.sut.evaluate("append", [py_list(items), py_list([7])])))
		self.assertEqual([4, 1, 5], from_list(self.sut.evaluate("reverse", [py_list(items)])))

	def test_two_arrows_in_one_pattern(self):
		tree = node(node(LEAF, 1, LEAF), 2, node(node(LEAF, 3, LEAF), 4, LEAF))
		self.assertEqual(4, self.sut.evaluate("count_nodes", [tree]))

	def test_no_clause_matches(self):
		sut = _evaluator(function("only_zero", clause([match("O")], 0)))
		with self.assertRaises(NoMatchError) as cm:
			sut.evaluate("only_zero", [nat(1)])
		self.assertEqual("only_zero", cm.exception.function)
		self.assertEqual((nat(1),), cm.exception.arguments)
		self.assertIn("S(O)", str(cm.exception))

	def test_no_match_deep_in_recursion_shows_the_way_there(self):
		sut = _evaluator(function("lopsided", clause([match("Cons", "_", arrow("n"))], "n")))
		with self.assertRaises(NoMatchError) as cm:
			sut.evaluate("lopsided", [py_list([1, 2])])
		self.assertEqual((NIL,), cm.exception.arguments)
		self.assertEqual(2, len(cm.exception.trace))
		self.assertIn("called from lopsided", str(cm.exception))

	def test_first_matching_clause_wins(self):
		sut = _evaluator(function("describe",
			clause([match("S", match("O"))], Literal("one")),
			clause([match("S", "_")], Literal("many")),
			clause(["_"], Literal("none")),
		))
		for n, expect in [(0, "none"), (1, "one"), (2, "many")]:
			with self.subTest(n):
				self.assertEqual(expect, sut.evaluate("describe", [nat(n)]))

	def test_literal_patterns_are_not_needed_for_literal_bodies(self):
		sut = _evaluator(function("greet", clause(["_"], make("Just", Literal("hello")))))
		self.assertEqual(Tagged("Just", ("hello",)), sut.evaluate("greet", [0]))

	def test_entry_is_checked(self):
		with self.assertRaises(UnknownFunctionError):
			self.sut.evaluate("frobnicate", [O])
		with self.assertRaises(ArityMismatchError):
			self.sut.evaluate("plus", [O])

	def test_bad_program_never_runs(self):
		with self.assertRaises(ProgramRejected):
			_evaluator(function("loop", clause(["x"], call("loop", "x"))), report=Report())

	def test_misshapen_value_simply_fails_to_match(self):
		with self.assertRaises(NoMatchError) as cm:
			self.sut.evaluate("plus", [O, Tagged("S")])
		self.assertEqual((O, Tagged("S")), cm.exception.arguments)
		self.assertIsNone(match_clause([match("S", arrow("c"))], [Tagged("S", (O, O))]))

	def test_primitive_trouble_is_an_evaluation_error(self):
		sut = _evaluator(function("ratio", clause(["a", "b"], call("/", "a", "b"))))
		self.assertEqual(0.5, sut.evaluate("ratio", [1, 2]))
		with self.assertRaises(PrimitiveError) as cm:
			sut.evaluate("ratio", [1, 0])
		self.assertEqual(("ratio", "/", (1, 0)), (cm.exception.function, cm.exception.primitive, cm.exception.operands))
		self.assertIsInstance(cm.exception.__cause__, ZeroDivisionError)


class ArrowSemantics(unittest.TestCase):
	""" Details about what arrows bind and in which order the recursive calls happen. """

	def test_arrow_binds_the_result_not_the_subterm(self):
		sut = _evaluator(function("double",
			clause([match("O")], make("O")),
			clause([match("S", arrow("d"))], make("S", make("S", "d"))),
		))
		self.assertEqual(nat(6), sut.evaluate("double", [nat(3)]))

	def test_other_arguments_ride_along_unchanged(self):
		# Each recursive call sees the same second argument.
		sut = _evaluator(function("pad",
			clause([match("Nil"), "x"], make("Nil")),
			clause([match("Cons", "_", arrow("rest")), "x"], make("Cons", "x", "rest")),
		))
		self.assertEqual([9, 9, 9], from_list(sut.evaluate("pad", [py_list([1, 2, 3]), 9])))

	def test_arrow_in_the_second_parameter(self):
		sut = _evaluator(function("count_down",
			clause(["tag", match("O")], make("Nil")),
			clause(["tag", match("S", arrow("rest"))], make("Cons", "tag", "rest")),
		))
		self.assertEqual(["z", "z"], from_list(sut.evaluate("count_down", ["z", nat(2)])))

	def test_arrow_two_constructors_deep(self):
		sut = _evaluator(function("halve",
			clause([match("O")], make("O")),
			clause([match("S", match("O"))], make("O")),
			clause([match("S", match("S", arrow("h")))], make("S", "h")),
		))
		for n in range(8):
			with self.subTest(n):
				self.assertEqual(n // 2, from_nat(sut.evaluate("halve", [nat(n)])))

	def test_alias_sees_the_subterm_while_arrow_sees_the_result(self):
		sut = _evaluator(function("pairs",
			clause([match("O")], make("Nil")),
			clause([match("S", alias("smaller", arrow("rest")))], make("Cons", call("to_number", "smaller"), "rest")),
		))
		self.assertEqual([2, 1, 0], from_list(sut.evaluate("pairs", [nat(3)])))

	def test_arrows_on_two_parameters(self):
		sut = _evaluator(function("zip_length",
			clause([match("Nil"), "_"], 0),
			clause(["_", match("Nil")], 0),
			clause([match("Cons", "_", arrow("a")), match("Cons", "_", arrow("b"))], call("+", 1, call("max", "a", "b"))),
		))
		# Each arrow recurs on its own slot alone: f(m, n) = 1 + max(f(m-1, n), f(m, n-1)).
		self.assertEqual(4, sut.evaluate("zip_length", [py_list([1, 2, 3]), py_list([1, 2])]))

	def test_outer_arrows_run_before_inner_ones(self):
		patterns = [match("Node", match("Node", arrow("a"), "_", "_"), "v", arrow("r"))]
		deep, right = node(LEAF, "deep", LEAF), node(LEAF, "right", LEAF)
		tree = node(node(deep, "skipped", LEAF), "root", right)
		bindings = match_clause(patterns, [tree])
		self.assertEqual({"v": "root"}, bindings.env)
		self.assertEqual([right, deep], [site.subterm for site in bindings.arrows])
		self.assertEqual([1, 2], [site.depth for site in bindings.arrows])

	def test_arrows_at_equal_depth_go_left_to_right(self):
		bindings = match_clause([match("Cons", "_", arrow()), match("Cons", "_", arrow())], [py_list([1]), py_list([2, 3])])
		self.assertEqual([0, 1], [site.slot for site in bindings.arrows])

	def test_failed_match_gives_nothing(self):
		self.assertIsNone(match_clause([match("Cons", "_", arrow())], [NIL]))
		self.assertIsNone(match_clause([match("S", match("O"))], [17]))


class Limitations(unittest.TestCase):

	def test_deep_data_does_not_touch_the_python_stack(self):
		sut = _evaluator()
		long = py_list(range(20000))
		self.assertEqual(20000, sut.evaluate("length", [long]))

	def test_stack_exhaustion_is_reported(self):
		sut = _evaluator(limits=Limits(max_depth=50))
		with self.assertRaises(StackExhaustionError):
			sut.evaluate("length", [py_list(range(100))])
		# The evaluator is none the worse for it:
		self.assertEqual(10, sut.evaluate("length", [py_list(range(10))]))

	def test_step_budget(self):
		sut = _evaluator(limits=Limits(max_steps=100))
		with self.assertRaises(StepBudgetError):
			sut.evaluate("length", [py_list(range(100))])
		self.assertEqual(3, sut.evaluate("length", [py_list(range(3))]))

	def test_limits_must_be_positive(self):
		for limits in [Limits(check_interval=0), Limits(max_depth=0)]:
			with self.subTest(limits), self.assertRaises(ValueError):
				_evaluator(limits=limits)

	def test_exhaustion_is_distinct_from_no_match(self):
		self.assertFalse(issubclass(StackExhaustionError, NoMatchError))
		self.assertTrue(issubclass(StepBudgetError, ExhaustionError))

	def test_cancellation(self):
		flag = threading.Event()
		flag.set()
		sut = _evaluator(limits=Limits(check_interval=16))
		with self.assertRaises(EvaluationCancelled):
			sut.evaluate("length", [py_list(range(100))], cancel=flag)
		flag.clear()
		self.assertEqual(100, sut.evaluate("length", [py_list(range(100))], cancel=flag))

	def test_threads_share_one_evaluator(self):
		sut = _evaluator()
		results = {}
		def work(n):
			results[n] = from_nat(sut.evaluate("times", [nat(n), nat(n)]))
		threads = [threading.Thread(target=work, args=[n]) for n in range(1, 9)]
		for t in threads: t.start()
		for t in threads: t.join()
		self.assertEqual({n: n*n for n in range(1, 9)}, results)

	def test_verbose_report_mentions_steps(self):
		report = Report(verbose=1)
		sut = _evaluator(report=report)
		with mock.patch("builtins.print") as fake_print:
			sut.evaluate("length", [py_list([1])])
		self.assertTrue(any("Evaluate" in c.args for c in fake_print.call_args_list))

	def test_size_goes_down(self):
		self.assertEqual(4, size(py_list([1, 2, 3])))
		self.assertEqual(1, size(O))
		self.assertEqual(0, size(17))

if __name__ == '__main__':
	unittest.main()
