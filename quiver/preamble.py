"""
The standard datatypes and a few functions over them, written in arrow patterns.
User programs generally start as STANDARD.extend(...).

Also some conversions between Python data and values, for the benefit of hosts and tests.
"""
from typing import Iterable
from .ontology import Tagged, VALUE
from .syntax import Program, datatype, function, clause, match, arrow, alias, make, call

NAT = datatype("Nat", O=(), S=("Nat",))
LIST = datatype("List", Nil=(), Cons=("any", "List"))
TREE = datatype("Tree", Leaf=(), Node=("Tree", "any", "Tree"))
# A host loop's `iter` answers Nothing when there is no further state.
OPTION = datatype("Option", Nothing=(), Just=("any",))

O = Tagged("O")
NIL = Tagged("Nil")
LEAF = Tagged("Leaf")
NOTHING = Tagged("Nothing")

STANDARD = Program(
	types=(NAT, LIST, TREE, OPTION),
	functions=(
		function("plus",
			clause(["a", match("O")], "a"),
			clause(["a", match("S", arrow("c"))], make("S", "c")),
		),
		function("times",
			clause(["_", match("O")], make("O")),
			clause(["a", match("S", arrow("c"))], call("plus", "c", "a")),
		),
		function("to_number",
			clause([match("O")], 0),
			clause([match("S", arrow("n"))], call("+", "n", 1)),
		),
		function("length",
			clause([match("Nil")], 0),
			clause([match("Cons", "_", arrow("n"))], call("+", 1, "n")),
		),
		function("total",
			clause([match("Nil")], 0),
			clause([match("Cons", "x", arrow("rest"))], call("+", "x", "rest")),
		),
		function("append",
			clause([match("Nil"), "ys"], "ys"),
			clause([match("Cons", "x", arrow("rest")), "_"], make("Cons", "x", "rest")),
		),
		function("reverse",
			clause([match("Nil")], make("Nil")),
			clause([match("Cons", "x", arrow("rest"))], call("append", "rest", make("Cons", "x", make("Nil")))),
		),
		function("count_nodes",
			clause([match("Leaf")], 0),
			clause([match("Node", arrow("left"), "_", arrow("right"))], call("+", 1, call("+", "left", "right"))),
		),
		function("factorial",
			clause([match("O")], 1),
			clause([alias("n", match("S", arrow("x")))], call("*", call("to_number", "n"), "x")),
		),
	),
)

def nat(n:int) -> Tagged:
	it = O
	for _ in range(n): it = Tagged("S", (it,))
	return it

def from_nat(value:VALUE) -> int:
	n = 0
	while value.tag == "S":
		n += 1
		value = value.fields[0]
	assert value.tag == "O", value
	return n

def py_list(items:Iterable[VALUE]) -> Tagged:
	it = NIL
	for x in reversed(list(items)): it = Tagged("Cons", (x, it))
	return it

def from_list(value:VALUE) -> list:
	items = []
	while value.tag == "Cons":
		items.append(value.fields[0])
		value = value.fields[1]
	assert value.tag == "Nil", value
	return items

def node(left:VALUE, item:VALUE, right:VALUE) -> Tagged:
	return Tagged("Node", (left, item, right))
